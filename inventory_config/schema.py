"""
Kernel configuration schema.

Frozen dataclasses describing every tunable of the inventory kernel.  YAML
files are parsed into these types by the loader; services receive the
relevant section (LedgerPolicy, BillingPolicy, ...) at construction.

Validation happens in ``__post_init__`` so that an invalid value can never
exist as a configuration object, whether it came from YAML or from a test.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


class MissingProductPolicy(str, Enum):
    """What the stock ledger does with a line whose product does not exist."""

    LENIENT = "lenient"  # skip the line, report it in the result
    STRICT = "strict"  # fail the whole movement before any stock changes


VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseSettings:
    """Connection settings passed to ``init_engine_from_url``."""

    url: str = "sqlite://"
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800

    def __post_init__(self):
        if not self.url:
            raise ValueError("database.url is required")
        if self.pool_size < 1:
            raise ValueError(f"database.pool_size must be >= 1, got {self.pool_size}")
        if self.max_overflow < 0:
            raise ValueError(
                f"database.max_overflow must be >= 0, got {self.max_overflow}"
            )


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"

    def __post_init__(self):
        if self.level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"logging.level must be one of {sorted(VALID_LOG_LEVELS)}, got '{self.level}'"
            )
        object.__setattr__(self, "level", self.level.upper())


# ---------------------------------------------------------------------------
# Behaviour policies
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerPolicy:
    """
    Stock ledger behaviour.

    The defaults reproduce the portal's long-standing behaviour: unknown
    products are skipped, stock may go negative and a storage failure
    part-way through a movement is reported, not undone.
    """

    missing_product_policy: MissingProductPolicy = MissingProductPolicy.LENIENT
    allow_negative_stock: bool = True
    compensate_on_failure: bool = False

    def __post_init__(self):
        object.__setattr__(
            self,
            "missing_product_policy",
            MissingProductPolicy(self.missing_product_policy),
        )

    @property
    def is_strict(self) -> bool:
        return self.missing_product_policy is MissingProductPolicy.STRICT


@dataclass(frozen=True)
class BillingPolicy:
    """Bill creation and printing behaviour."""

    snapshot_unit_price: bool = False
    issue_stock_on_invoice: bool = False
    home_state_code: str = "18"
    default_gst_slab: int = 18

    def __post_init__(self):
        if len(self.home_state_code) != 2 or not self.home_state_code.isdigit():
            raise ValueError(
                f"billing.home_state_code must be a two-digit code, got '{self.home_state_code}'"
            )
        if not 0 <= self.default_gst_slab <= 100:
            raise ValueError(
                f"billing.default_gst_slab must be within 0..100, got {self.default_gst_slab}"
            )


@dataclass(frozen=True)
class CatalogPolicy:
    low_stock_threshold: Decimal = Decimal("25")
    max_page_size: int = 100

    def __post_init__(self):
        threshold = Decimal(str(self.low_stock_threshold))
        if threshold < 0:
            raise ValueError(
                f"catalog.low_stock_threshold must be >= 0, got {threshold}"
            )
        object.__setattr__(self, "low_stock_threshold", threshold)
        if self.max_page_size < 1:
            raise ValueError(
                f"catalog.max_page_size must be >= 1, got {self.max_page_size}"
            )


@dataclass(frozen=True)
class RateLimitSettings:
    """Per-client request budget for the portal's write endpoints."""

    limit: int = 100
    window_seconds: int = 60

    def __post_init__(self):
        if self.limit < 1:
            raise ValueError(f"rate_limit.limit must be >= 1, got {self.limit}")
        if self.window_seconds < 1:
            raise ValueError(
                f"rate_limit.window_seconds must be >= 1, got {self.window_seconds}"
            )


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KernelConfig:
    """Complete, validated configuration of the inventory kernel."""

    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    ledger: LedgerPolicy = field(default_factory=LedgerPolicy)
    billing: BillingPolicy = field(default_factory=BillingPolicy)
    catalog: CatalogPolicy = field(default_factory=CatalogPolicy)
    rate_limit: RateLimitSettings = field(default_factory=RateLimitSettings)
    source: str = "<defaults>"
