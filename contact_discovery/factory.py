"""Factory helpers for constructing providers and the orchestrator from configuration."""
from __future__ import annotations

import importlib
import logging
import os
from typing import Any, Dict, List, Mapping, Optional

from .cache import MemoryResultCache, RedisResultCache
from .config import PROVIDER_ROLES, ConfigurationError, DiscoveryConfig, iter_enabled_provider_configs
from .orchestrator import DiscoveryOrchestrator
from .rate_limit import DelayPolicy, RateLimitedProvider, RateLimiter
from .store import InMemoryStore, JsonFileStore

LOGGER = logging.getLogger(__name__)


def _load_class(path: str):
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise ConfigurationError(f"Invalid provider class path '{path}'")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ConfigurationError(f"Module '{module_name}' does not define '{attr}'") from exc


def build_provider(provider_cfg: Mapping[str, Any]) -> Any:
    """Instantiate one provider entry, wrapped in a rate limiter when configured."""

    class_path = provider_cfg.get("class")
    if not class_path:
        raise ConfigurationError("Provider configuration missing required 'class' field")

    options = dict(provider_cfg.get("options") or {})
    api_key_env = provider_cfg.get("api_key_env")
    if api_key_env:
        api_key = os.environ.get(api_key_env, "")
        if not api_key:
            LOGGER.warning("Environment variable %s is not set; %s calls will fail", api_key_env, class_path)
        options["api_key"] = api_key

    provider_cls = _load_class(class_path)
    instance = provider_cls(**options)

    display_name = provider_cfg.get("name")
    delay_seconds = float(provider_cfg.get("delay_seconds", 0) or 0)
    calls_per_minute = provider_cfg.get("rate_limit_per_minute")
    if not display_name and not delay_seconds and not calls_per_minute:
        return instance
    return RateLimitedProvider(
        instance,
        display_name=display_name,
        delay_policy=DelayPolicy(delay_seconds=delay_seconds),
        rate_limiter=RateLimiter(float(calls_per_minute) if calls_per_minute else None),
    )


def build_providers(config: Mapping[str, Any]) -> Dict[str, List[Any]]:
    """Group enabled providers by role, preserving configured order."""

    grouped: Dict[str, List[Any]] = {role: [] for role in PROVIDER_ROLES}
    for provider_cfg in iter_enabled_provider_configs(config):
        role = provider_cfg.get("role")
        if role not in grouped:
            raise ConfigurationError(
                f"Provider '{provider_cfg.get('name')}' has unknown role '{role}'. Expected one of {list(PROVIDER_ROLES)}"
            )
        grouped[role].append(build_provider(provider_cfg))
    return grouped


def _single(grouped: Dict[str, List[Any]], role: str) -> Optional[Any]:
    providers = grouped.get(role) or []
    if len(providers) > 1:
        LOGGER.warning("Only one %s provider is used; ignoring %d extra", role, len(providers) - 1)
    return providers[0] if providers else None


def build_cache(config: Mapping[str, Any]):
    cache_cfg = config.get("cache") or {}
    backend = str(cache_cfg.get("backend", "memory")).lower()
    if backend == "memory":
        return MemoryResultCache()
    if backend == "redis":
        return RedisResultCache(cache_cfg.get("url") or "redis://localhost:6379")
    if backend in {"none", "disabled"}:
        return None
    raise ConfigurationError(f"Unsupported cache backend '{backend}'")


def build_store(config: Mapping[str, Any]):
    path = (config.get("store") or {}).get("path")
    if path:
        return JsonFileStore(path)
    return InMemoryStore()


def build_orchestrator(config: Mapping[str, Any], *, stats: Any = None) -> DiscoveryOrchestrator:
    grouped = build_providers(config)
    orchestrator = DiscoveryOrchestrator(
        profile_search=_single(grouped, "profile_search"),
        people_providers=grouped["people_enrichment"],
        profile_providers=grouped["profile_enrichment"],
        email_validator=_single(grouped, "email_validator"),
        phone_validator=_single(grouped, "phone_validator"),
        cache=build_cache(config),
        config=DiscoveryConfig.from_mapping(config.get("discovery")),
        stats=stats,
    )
    LOGGER.debug("Built orchestrator with providers %s", orchestrator.provider_names)
    return orchestrator


__all__ = ["build_cache", "build_orchestrator", "build_provider", "build_providers", "build_store"]
