"""HTTP front end for contact discovery."""

from .app import create_app

__all__ = ["create_app"]
