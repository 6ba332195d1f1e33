from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional, Tuple

import yaml

from upline_hierarchy.core.exceptions import ConfigurationError
from upline_hierarchy.normalization.identifiers import normalize_digits, normalize_email

CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "upline_hierarchy.yml"
CONFIG_ENV_VAR = "UPLINE_HIERARCHY_CONFIG"


@dataclass(frozen=True, slots=True)
class ResolverConfig:
    """
    Options recognized by the resolution engine.

    Immutable so one instance can be shared by concurrent builds.
    """
    known_root_identifier: Optional[str] = None
    fallback_root_contact_id: Optional[str] = None
    fallback_root_email: Optional[str] = None
    exclude_test_candidates: bool = False
    test_candidate_id_allowlist: FrozenSet[str] = frozenset()
    test_candidate_id_blocklist: FrozenSet[str] = frozenset()
    test_name_pattern: Optional[str] = "test"
    test_licensing_state_sentinels: Tuple[str, ...] = ("test",)
    test_email_domains: Tuple[str, ...] = ("example.com",)
    create_unresolved_placeholders: bool = False

    @property
    def root_key(self) -> Optional[str]:
        return normalize_digits(self.known_root_identifier)

    @property
    def root_email(self) -> Optional[str]:
        return normalize_email(self.fallback_root_email)

    def validate(self) -> "ResolverConfig":
        if not self.known_root_identifier:
            raise ConfigurationError("resolver.known_root_identifier is not set")
        if self.root_key is None:
            raise ConfigurationError(
                f"resolver.known_root_identifier has no digits: {self.known_root_identifier!r}"
            )
        overlap = self.test_candidate_id_allowlist & self.test_candidate_id_blocklist
        if overlap:
            raise ConfigurationError(
                f"ids present in both test allowlist and blocklist: {sorted(overlap)}"
            )
        return self

    def with_overrides(self, **overrides: Any) -> "ResolverConfig":
        """Return a copy with the non-None overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ResolverConfig":
        data = data or {}
        known = cls.__dataclass_fields__.keys()
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ConfigurationError(f"unknown resolver options: {unknown}")

        def _str_or_none(key: str) -> Optional[str]:
            value = data.get(key)
            if value is None:
                return None
            value = str(value).strip()
            return value or None

        pattern = data.get("test_name_pattern", "test")
        return cls(
            known_root_identifier=_str_or_none("known_root_identifier"),
            fallback_root_contact_id=_str_or_none("fallback_root_contact_id"),
            fallback_root_email=_str_or_none("fallback_root_email"),
            exclude_test_candidates=bool(data.get("exclude_test_candidates", False)),
            test_candidate_id_allowlist=frozenset(
                str(x) for x in data.get("test_candidate_id_allowlist") or []
            ),
            test_candidate_id_blocklist=frozenset(
                str(x) for x in data.get("test_candidate_id_blocklist") or []
            ),
            test_name_pattern=str(pattern) if pattern else None,
            test_licensing_state_sentinels=tuple(
                str(x) for x in data.get("test_licensing_state_sentinels", ["test"]) or []
            ),
            test_email_domains=tuple(
                str(x).lower() for x in data.get("test_email_domains", ["example.com"]) or []
            ),
            create_unresolved_placeholders=bool(
                data.get("create_unresolved_placeholders", False)
            ),
        )


class AppConfig:
    def __init__(self, data: Dict[str, Any]):
        self.paths = data.get("paths", {}) or {}
        self.logging = data.get("logging", {}) or {}
        self.crm_fields = data.get("crm_fields", {}) or {}
        self.resolver = ResolverConfig.from_dict(data.get("resolver"))
        self.debug = bool(data.get("debug", False))


def _config_path(path: str | Path | None) -> Optional[Path]:
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return None


def load_config(path: str | Path | None = None) -> AppConfig:
    """
    Load the YAML configuration.

    An explicit path (argument or environment variable) must exist; the
    bundled default is optional so the package also works outside a checkout.
    """
    explicit = _config_path(path)
    target = explicit or CONFIG_PATH

    if not target.exists():
        if explicit is not None:
            raise FileNotFoundError(f"Config file not found: {target}")
        return AppConfig({})

    with open(target, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {target}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config root must be a mapping: {target}")

    return AppConfig(data)


_config_cache: Optional[AppConfig] = None


def get_config() -> AppConfig:
    global _config_cache
    if _config_cache is None:
        _config_cache = load_config()
    return _config_cache


def reset_config_cache() -> None:
    global _config_cache
    _config_cache = None
