from __future__ import annotations

import json

import pytest

from contact_discovery.cache import MemoryResultCache, RedisResultCache
from contact_discovery.config import ConfigurationError, DiscoveryConfig, load_configuration
from contact_discovery.factory import build_cache, build_orchestrator, build_provider, build_providers, build_store
from contact_discovery.providers import ApolloProvider, StaticEnrichmentProvider
from contact_discovery.rate_limit import RateLimitedProvider
from contact_discovery.store import InMemoryStore, JsonFileStore


def test_load_yaml_and_json(tmp_path) -> None:
    yaml_path = tmp_path / "config.yaml"
    yaml_path.write_text("discovery:\n  default_region: New Zealand\nproviders: []\n", encoding="utf-8")
    json_path = tmp_path / "config.json"
    json_path.write_text(json.dumps({"cache": {"backend": "none"}}), encoding="utf-8")
    empty_path = tmp_path / "empty.yml"
    empty_path.write_text("", encoding="utf-8")

    assert load_configuration(yaml_path)["discovery"] == {"default_region": "New Zealand"}
    assert load_configuration(json_path) == {"cache": {"backend": "none"}}
    assert load_configuration(empty_path) == {}


def test_load_configuration_errors(tmp_path) -> None:
    with pytest.raises(ConfigurationError, match="was not found"):
        load_configuration(tmp_path / "missing.yaml")

    toml_path = tmp_path / "config.toml"
    toml_path.write_text("x = 1", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Unsupported configuration format"):
        load_configuration(toml_path)

    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="could not be parsed"):
        load_configuration(broken)

    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="must contain a mapping"):
        load_configuration(listing)


def test_discovery_config_from_mapping() -> None:
    config = DiscoveryConfig.from_mapping({"batch_concurrency": "0", "provider_timeout_seconds": "5"})

    assert config.batch_concurrency == 1
    assert config.provider_timeout_seconds == 5.0
    assert config.default_region == "Australia"
    assert config.max_domain_queries == 2
    assert DiscoveryConfig.from_mapping({"max_domain_queries": -1}).max_domain_queries == 0
    assert DiscoveryConfig.from_mapping(None) == DiscoveryConfig()

    with pytest.raises(ConfigurationError):
        DiscoveryConfig.from_mapping({"cache_ttl_seconds": "soon"})


def test_build_provider_reads_api_key_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("APOLLO_TEST_KEY", "secret")

    provider = build_provider(
        {"class": "contact_discovery.providers.apollo.ApolloProvider", "api_key_env": "APOLLO_TEST_KEY"}
    )

    assert isinstance(provider, ApolloProvider)
    assert provider.api_key == "secret"


def test_build_provider_wraps_when_throttled() -> None:
    provider = build_provider(
        {
            "class": "contact_discovery.providers.sample.StaticEnrichmentProvider",
            "name": "Demo Source",
            "rate_limit_per_minute": 30,
            "options": {"emails": ["jane@techcorp.com"]},
        }
    )

    assert isinstance(provider, RateLimitedProvider)
    assert provider.name == "Demo Source"
    assert isinstance(provider.wrapped, StaticEnrichmentProvider)


def test_build_provider_rejects_bad_class_paths() -> None:
    with pytest.raises(ConfigurationError, match="missing required 'class'"):
        build_provider({})
    with pytest.raises(ConfigurationError, match="Invalid provider class path"):
        build_provider({"class": "NoModule"})
    with pytest.raises(ConfigurationError, match="does not define"):
        build_provider({"class": "contact_discovery.providers.sample.Missing"})


def test_build_providers_groups_by_role_and_skips_disabled() -> None:
    config = {
        "providers": [
            {"role": "people_enrichment", "class": "contact_discovery.providers.sample.StaticEnrichmentProvider"},
            {
                "role": "people_enrichment",
                "enabled": False,
                "class": "contact_discovery.providers.sample.StaticEnrichmentProvider",
            },
            {"role": "profile_search", "class": "contact_discovery.providers.sample.StaticSearchProvider"},
        ]
    }

    grouped = build_providers(config)

    assert len(grouped["people_enrichment"]) == 1
    assert len(grouped["profile_search"]) == 1
    assert grouped["email_validator"] == []

    with pytest.raises(ConfigurationError, match="unknown role"):
        build_providers({"providers": [{"role": "crm", "class": "x.Y"}]})


def test_build_cache_and_store(tmp_path) -> None:
    assert isinstance(build_cache({}), MemoryResultCache)
    assert isinstance(build_cache({"cache": {"backend": "redis", "url": "redis://cache:6379/1"}}), RedisResultCache)
    assert build_cache({"cache": {"backend": "none"}}) is None
    with pytest.raises(ConfigurationError):
        build_cache({"cache": {"backend": "memcached"}})

    assert isinstance(build_store({}), InMemoryStore)
    assert isinstance(build_store({"store": {"path": str(tmp_path / "state.json")}}), JsonFileStore)


def test_build_orchestrator_applies_discovery_settings() -> None:
    config = {
        "discovery": {"default_region": "New Zealand", "batch_concurrency": 5},
        "cache": {"backend": "none"},
        "providers": [
            {
                "role": "people_enrichment",
                "name": "apollo",
                "class": "contact_discovery.providers.sample.StaticEnrichmentProvider",
            },
        ],
    }

    orchestrator = build_orchestrator(config)

    assert orchestrator.config.default_region == "New Zealand"
    assert orchestrator.config.batch_concurrency == 5
    assert orchestrator.cache is None
    assert orchestrator.provider_names["people_enrichment"] == ["apollo"]
