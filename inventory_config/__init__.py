"""
inventory_config -- single public entrypoint for kernel configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration files
    or environment variables directly.

Architecture position:
    Configuration -- sits beside ``inventory_kernel`` and below
    ``inventory_modules`` / ``inventory_services``.  The kernel MUST NEVER
    import from ``inventory_config``; module services receive the policy
    sections they need at construction.

Resolution order (later wins):
    1. Packaged ``defaults.yaml``.
    2. The file passed as ``path``, or else the file named by the
       ``INVENTORY_CONFIG`` environment variable.
    3. ``DATABASE_URL`` environment variable for ``database.url``.

Failure modes:
    - ``FileNotFoundError`` -- override file does not exist.
    - ``ValueError`` -- schema validation failures.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from inventory_config.loader import load_yaml_file, merge_config_data, parse_config
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

_logger = logging.getLogger("inventory_kernel.config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

CONFIG_ENV_VAR = "INVENTORY_CONFIG"
DATABASE_URL_ENV_VAR = "DATABASE_URL"


def get_active_config(path: Path | str | None = None) -> KernelConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: Optional override file.  When omitted, ``INVENTORY_CONFIG``
            is consulted.

    Returns:
        A validated, frozen KernelConfig.
    """
    data = load_yaml_file(DEFAULTS_PATH)
    sources = [str(DEFAULTS_PATH)]

    override = path if path is not None else os.environ.get(CONFIG_ENV_VAR)
    if override:
        data = merge_config_data(data, load_yaml_file(Path(override)))
        sources.append(str(override))

    database_url = os.environ.get(DATABASE_URL_ENV_VAR)
    if database_url:
        data = merge_config_data(data, {"database": {"url": database_url}})
        sources.append(f"${DATABASE_URL_ENV_VAR}")

    config = parse_config(data, source=" + ".join(sources))

    _logger.info(
        "INVENTORY_CONFIG_TRACE",
        extra={
            "trace_type": "INVENTORY_CONFIG_TRACE",
            "config_source": config.source,
            "missing_product_policy": config.ledger.missing_product_policy.value,
            "allow_negative_stock": config.ledger.allow_negative_stock,
            "compensate_on_failure": config.ledger.compensate_on_failure,
            "snapshot_unit_price": config.billing.snapshot_unit_price,
        },
    )
    return config


__all__ = [
    "get_active_config",
    "KernelConfig",
    "DatabaseSettings",
    "LoggingSettings",
    "LedgerPolicy",
    "BillingPolicy",
    "CatalogPolicy",
    "RateLimitSettings",
    "MissingProductPolicy",
]
