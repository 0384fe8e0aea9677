"""Multi-source contact discovery and identity resolution."""

from . import models  # noqa: F401
from .errors import ContactDiscoveryError, InvalidQueryError, ProviderError  # noqa: F401
from .models import (
    BatchResult,
    ConsolidatedFieldRecord,
    ContactFieldRecord,
    DiscoveryResult,
    PersonDescriptor,
    ScoredProfileHit,
    WatchlistEntry,
)
from .orchestrator import DiscoveryOrchestrator, DiscoveryState  # noqa: F401

__all__ = [
    "BatchResult",
    "ConsolidatedFieldRecord",
    "ContactDiscoveryError",
    "ContactFieldRecord",
    "DiscoveryOrchestrator",
    "DiscoveryResult",
    "DiscoveryState",
    "InvalidQueryError",
    "PersonDescriptor",
    "ProviderError",
    "ScoredProfileHit",
    "WatchlistEntry",
    "api",
    "ingestion",
    "orchestrator",
    "providers",
]
