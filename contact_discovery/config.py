"""Configuration helpers for the contact discovery pipeline."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

import yaml

from .errors import ContactDiscoveryError

LOGGER = logging.getLogger(__name__)


class ConfigurationError(ContactDiscoveryError, RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}

PROVIDER_ROLES = (
    "profile_search",
    "people_enrichment",
    "profile_enrichment",
    "email_validator",
    "phone_validator",
)


@dataclass(frozen=True)
class DiscoveryConfig:
    """Tunables for :class:`~contact_discovery.orchestrator.DiscoveryOrchestrator`."""

    default_region: str = "Australia"
    cache_ttl_seconds: int = 30 * 24 * 60 * 60
    provider_timeout_seconds: float = 20.0
    search_delay_seconds: float = 0.3
    batch_concurrency: int = 3
    batch_delay_seconds: float = 1.0
    max_search_queries: int = 3
    max_domain_queries: int = 2

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "DiscoveryConfig":
        data = data or {}
        defaults = cls()
        try:
            return cls(
                default_region=str(data.get("default_region", defaults.default_region)),
                cache_ttl_seconds=int(data.get("cache_ttl_seconds", defaults.cache_ttl_seconds)),
                provider_timeout_seconds=float(
                    data.get("provider_timeout_seconds", defaults.provider_timeout_seconds)
                ),
                search_delay_seconds=float(data.get("search_delay_seconds", defaults.search_delay_seconds)),
                batch_concurrency=max(1, int(data.get("batch_concurrency", defaults.batch_concurrency))),
                batch_delay_seconds=float(data.get("batch_delay_seconds", defaults.batch_delay_seconds)),
                max_search_queries=max(1, int(data.get("max_search_queries", defaults.max_search_queries))),
                max_domain_queries=max(0, int(data.get("max_domain_queries", defaults.max_domain_queries))),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid discovery settings: {exc}") from exc


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Configuration file '{file_path}' could not be parsed: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping")
    return data


def iter_enabled_provider_configs(config: Mapping[str, Any]) -> Iterable[Dict[str, Any]]:
    providers = config.get("providers") or []
    for provider in providers:
        if provider.get("enabled", True):
            yield provider
        else:
            LOGGER.debug("Skipping disabled provider %s", provider.get("name"))


__all__ = [
    "PROVIDER_ROLES",
    "ConfigurationError",
    "DiscoveryConfig",
    "iter_enabled_provider_configs",
    "load_configuration",
]
