"""
Tests for configuration loading.

Covers:
- Packaged defaults
- Override files deep-merged over defaults
- INVENTORY_CONFIG and DATABASE_URL environment overrides
- Rejection of unknown sections, keys and bad values
- INVENTORY_CONFIG_TRACE emission
"""

from decimal import Decimal

import pytest

from inventory_config import get_active_config
from inventory_config.loader import merge_config_data, parse_config
from inventory_config.schema import (
    BillingPolicy,
    LedgerPolicy,
    LoggingSettings,
    MissingProductPolicy,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("INVENTORY_CONFIG", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)


class TestDefaults:

    def test_packaged_defaults(self):
        config = get_active_config()

        assert config.database.url == "sqlite://"
        assert config.logging.level == "INFO"
        assert config.ledger.missing_product_policy is MissingProductPolicy.LENIENT
        assert config.ledger.allow_negative_stock is True
        assert config.ledger.compensate_on_failure is False
        assert config.billing.snapshot_unit_price is False
        assert config.billing.home_state_code == "18"
        assert config.catalog.low_stock_threshold == Decimal("25")
        assert config.rate_limit.limit == 100
        assert config.rate_limit.window_seconds == 60

    def test_defaults_match_schema_defaults(self):
        config = get_active_config()
        assert config.ledger == LedgerPolicy()
        assert config.billing == BillingPolicy()

    def test_config_trace_logged(self, captured_logs):
        get_active_config()
        traces = [r for r in captured_logs() if r["message"] == "INVENTORY_CONFIG_TRACE"]
        assert traces
        assert traces[-1]["missing_product_policy"] == "lenient"


class TestOverrides:

    def test_override_file_merges_over_defaults(self, tmp_path):
        override = tmp_path / "inventory.yaml"
        override.write_text(
            "ledger:\n"
            "  missing_product_policy: strict\n"
            "  compensate_on_failure: true\n"
            "billing:\n"
            "  home_state_code: 07\n"
        )

        config = get_active_config(override)

        assert config.ledger.is_strict
        assert config.ledger.compensate_on_failure is True
        assert config.ledger.allow_negative_stock is True
        assert config.billing.home_state_code == "07"
        assert str(override) in config.source

    def test_env_var_names_override_file(self, tmp_path, monkeypatch):
        override = tmp_path / "inventory.yaml"
        override.write_text("catalog:\n  low_stock_threshold: 10\n")
        monkeypatch.setenv("INVENTORY_CONFIG", str(override))

        assert get_active_config().catalog.low_stock_threshold == Decimal("10")

    def test_database_url_env_wins(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://inventory@localhost/inventory")

        config = get_active_config()

        assert config.database.url == "postgresql://inventory@localhost/inventory"
        assert "$DATABASE_URL" in config.source

    def test_missing_override_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml")


class TestValidation:

    def test_unknown_section_rejected(self):
        with pytest.raises(ValueError, match="Unknown configuration sections"):
            parse_config({"warehouse": {}})

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="Unknown keys in 'ledger'"):
            parse_config({"ledger": {"missing_products": "strict"}})

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError, match="missing_product_policy"):
            parse_config({"ledger": {"missing_product_policy": "ignore"}})

    def test_non_boolean_flag_rejected(self):
        with pytest.raises(ValueError, match="allow_negative_stock"):
            parse_config({"ledger": {"allow_negative_stock": "yes"}})

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValueError, match="low_stock_threshold"):
            parse_config({"catalog": {"low_stock_threshold": -1}})

    def test_bad_state_code_rejected(self):
        with pytest.raises(ValueError, match="home_state_code"):
            parse_config({"billing": {"home_state_code": "ASM"}})

    def test_log_level_normalized(self):
        assert LoggingSettings(level="debug").level == "DEBUG"
        with pytest.raises(ValueError):
            LoggingSettings(level="verbose")

    def test_rate_limit_must_be_positive(self):
        with pytest.raises(ValueError, match="rate_limit.limit"):
            parse_config({"rate_limit": {"limit": 0}})

    def test_policy_objects_are_frozen(self):
        policy = LedgerPolicy()
        with pytest.raises(AttributeError):
            policy.allow_negative_stock = False


class TestMerge:

    def test_deep_merge_keeps_sibling_keys(self):
        merged = merge_config_data(
            {"ledger": {"a": 1, "b": 2}, "billing": {"c": 3}},
            {"ledger": {"b": 20}},
        )
        assert merged == {"ledger": {"a": 1, "b": 20}, "billing": {"c": 3}}
