"""
Configuration Loader (``inventory_config.loader``).

Responsibility
--------------
Loads YAML configuration files and parses them into the typed, frozen
dataclasses of ``inventory_config.schema``.  The single public entry point
for runtime config is ``inventory_config.get_active_config()``.

Invariants enforced
-------------------
* Unknown sections or keys raise ``ValueError``; a misspelt policy name
  must never fall back to a default silently.
* Override files are deep-merged over the packaged defaults, so an override
  only needs the keys it changes.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrong value types or out-of-range values  -> ``ValueError``.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from inventory_config.schema import (
    BillingPolicy,
    CatalogPolicy,
    DatabaseSettings,
    KernelConfig,
    LedgerPolicy,
    LoggingSettings,
    MissingProductPolicy,
    RateLimitSettings,
)

_SECTIONS = ("database", "logging", "ledger", "billing", "catalog", "rate_limit")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top-level YAML document must be a mapping")
    return data


def merge_config_data(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge ``override`` into a copy of ``base``."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config_data(merged[key], value)
        else:
            merged[key] = value
    return merged


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _section(data: dict[str, Any], name: str, allowed: set[str]) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' must be a mapping, got {type(section).__name__}")
    unknown = set(section) - allowed
    if unknown:
        raise ValueError(f"Unknown keys in '{name}': {sorted(unknown)}")
    return section


def _bool(section: str, key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{section}.{key} must be true or false, got {value!r}")
    return value


def _int(section: str, key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{section}.{key} must be an integer, got {value!r}")
    return value


def _decimal(section: str, key: str, value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"{section}.{key} must be a number, got {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{section}.{key} must be a number, got {value!r}") from None


# ---------------------------------------------------------------------------
# Section parsers
# ---------------------------------------------------------------------------


def parse_database(data: dict[str, Any]) -> DatabaseSettings:
    fields = {"url", "echo", "pool_size", "max_overflow", "pool_timeout", "pool_recycle"}
    s = _section(data, "database", fields)
    defaults = DatabaseSettings()
    return DatabaseSettings(
        url=str(s.get("url", defaults.url)),
        echo=_bool("database", "echo", s.get("echo", defaults.echo)),
        pool_size=_int("database", "pool_size", s.get("pool_size", defaults.pool_size)),
        max_overflow=_int(
            "database", "max_overflow", s.get("max_overflow", defaults.max_overflow)
        ),
        pool_timeout=_int(
            "database", "pool_timeout", s.get("pool_timeout", defaults.pool_timeout)
        ),
        pool_recycle=_int(
            "database", "pool_recycle", s.get("pool_recycle", defaults.pool_recycle)
        ),
    )


def parse_logging(data: dict[str, Any]) -> LoggingSettings:
    s = _section(data, "logging", {"level"})
    return LoggingSettings(level=str(s.get("level", LoggingSettings.level)))


def parse_ledger(data: dict[str, Any]) -> LedgerPolicy:
    s = _section(
        data,
        "ledger",
        {"missing_product_policy", "allow_negative_stock", "compensate_on_failure"},
    )
    defaults = LedgerPolicy()
    raw_policy = str(s.get("missing_product_policy", defaults.missing_product_policy.value))
    try:
        policy = MissingProductPolicy(raw_policy.lower())
    except ValueError:
        raise ValueError(
            "ledger.missing_product_policy must be one of "
            f"{[p.value for p in MissingProductPolicy]}, got '{raw_policy}'"
        ) from None
    return LedgerPolicy(
        missing_product_policy=policy,
        allow_negative_stock=_bool(
            "ledger",
            "allow_negative_stock",
            s.get("allow_negative_stock", defaults.allow_negative_stock),
        ),
        compensate_on_failure=_bool(
            "ledger",
            "compensate_on_failure",
            s.get("compensate_on_failure", defaults.compensate_on_failure),
        ),
    )


def parse_billing(data: dict[str, Any]) -> BillingPolicy:
    s = _section(
        data,
        "billing",
        {"snapshot_unit_price", "issue_stock_on_invoice", "home_state_code", "default_gst_slab"},
    )
    defaults = BillingPolicy()
    return BillingPolicy(
        snapshot_unit_price=_bool(
            "billing",
            "snapshot_unit_price",
            s.get("snapshot_unit_price", defaults.snapshot_unit_price),
        ),
        issue_stock_on_invoice=_bool(
            "billing",
            "issue_stock_on_invoice",
            s.get("issue_stock_on_invoice", defaults.issue_stock_on_invoice),
        ),
        # YAML reads an unquoted 07 as the integer 7
        home_state_code=str(s.get("home_state_code", defaults.home_state_code)).zfill(2),
        default_gst_slab=_int(
            "billing",
            "default_gst_slab",
            s.get("default_gst_slab", defaults.default_gst_slab),
        ),
    )


def parse_catalog(data: dict[str, Any]) -> CatalogPolicy:
    s = _section(data, "catalog", {"low_stock_threshold", "max_page_size"})
    defaults = CatalogPolicy()
    return CatalogPolicy(
        low_stock_threshold=_decimal(
            "catalog",
            "low_stock_threshold",
            s.get("low_stock_threshold", defaults.low_stock_threshold),
        ),
        max_page_size=_int(
            "catalog", "max_page_size", s.get("max_page_size", defaults.max_page_size)
        ),
    )


def parse_rate_limit(data: dict[str, Any]) -> RateLimitSettings:
    s = _section(data, "rate_limit", {"limit", "window_seconds"})
    defaults = RateLimitSettings()
    return RateLimitSettings(
        limit=_int("rate_limit", "limit", s.get("limit", defaults.limit)),
        window_seconds=_int(
            "rate_limit",
            "window_seconds",
            s.get("window_seconds", defaults.window_seconds),
        ),
    )


def parse_config(data: dict[str, Any], source: str = "<inline>") -> KernelConfig:
    """
    Parse a complete configuration mapping into a KernelConfig.

    Raises:
        ValueError: on unknown sections/keys or invalid values.
    """
    unknown = set(data) - set(_SECTIONS)
    if unknown:
        raise ValueError(f"Unknown configuration sections: {sorted(unknown)}")
    return KernelConfig(
        database=parse_database(data),
        logging=parse_logging(data),
        ledger=parse_ledger(data),
        billing=parse_billing(data),
        catalog=parse_catalog(data),
        rate_limit=parse_rate_limit(data),
        source=source,
    )
