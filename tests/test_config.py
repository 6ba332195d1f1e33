# tests/test_config.py

from __future__ import annotations

import pytest

from upline_hierarchy.config import (
    CONFIG_ENV_VAR,
    AppConfig,
    ResolverConfig,
    load_config,
)
from upline_hierarchy.core.exceptions import ConfigurationError


def test_validate_requires_known_root():
    with pytest.raises(ConfigurationError):
        ResolverConfig().validate()
    with pytest.raises(ConfigurationError):
        ResolverConfig(known_root_identifier="none").validate()


def test_validate_rejects_overlapping_lists():
    cfg = ResolverConfig(
        known_root_identifier="1",
        test_candidate_id_allowlist=frozenset({"a"}),
        test_candidate_id_blocklist=frozenset({"a", "b"}),
    )

    with pytest.raises(ConfigurationError):
        cfg.validate()


def test_root_key_and_email_are_normalized():
    cfg = ResolverConfig(known_root_identifier="1855-0335", fallback_root_email=" Owner@Agency.com")

    assert cfg.validate() is cfg
    assert cfg.root_key == "18550335"
    assert cfg.root_email == "owner@agency.com"


def test_from_dict_rejects_unknown_options():
    with pytest.raises(ConfigurationError):
        ResolverConfig.from_dict({"known_root_identifier": "1", "bogus": True})


def test_from_dict_coerces_values():
    cfg = ResolverConfig.from_dict(
        {
            "known_root_identifier": 18550335,
            "test_candidate_id_blocklist": ["a", 2],
            "test_email_domains": ["Example.COM"],
            "exclude_test_candidates": True,
        }
    )

    assert cfg.known_root_identifier == "18550335"
    assert cfg.test_candidate_id_blocklist == frozenset({"a", "2"})
    assert cfg.test_email_domains == ("example.com",)
    assert cfg.exclude_test_candidates


def test_with_overrides_ignores_none():
    cfg = ResolverConfig(known_root_identifier="1")

    assert cfg.with_overrides(fallback_root_contact_id=None) is cfg
    assert cfg.with_overrides(fallback_root_contact_id="x").fallback_root_contact_id == "x"


def test_load_config_from_file(tmp_path):
    path = tmp_path / "cfg.yml"
    path.write_text(
        "debug: true\nresolver:\n  known_root_identifier: '42'\ncrm_fields:\n  licensing_number: [npn]\n",
        encoding="utf-8",
    )

    cfg = load_config(path)

    assert isinstance(cfg, AppConfig)
    assert cfg.debug
    assert cfg.resolver.known_root_identifier == "42"
    assert cfg.crm_fields == {"licensing_number": ["npn"]}


def test_load_config_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "env.yml"
    path.write_text("resolver:\n  known_root_identifier: '7'\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

    assert load_config().resolver.known_root_identifier == "7"


def test_load_config_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yml")

    bad = tmp_path / "bad.yml"
    bad.write_text("resolver: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(bad)

    scalar = tmp_path / "scalar.yml"
    scalar.write_text("just a string\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(scalar)


def test_bundled_config_is_valid(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)

    cfg = load_config()

    assert cfg.resolver.validate().root_key == "18550335"
