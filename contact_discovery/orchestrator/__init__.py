"""Workflow orchestration for resolving people into consolidated contact records."""

from .service import DiscoveryOrchestrator, DiscoveryState

__all__ = ["DiscoveryOrchestrator", "DiscoveryState"]
