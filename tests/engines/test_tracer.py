"""Tests for the engine trace decorator and input fingerprints."""

from decimal import Decimal

from inventory_engines.bill_totals import PricedLine, compute_total
from inventory_engines.tracer import compute_input_fingerprint, traced_engine
from inventory_kernel.domain.dtos import AddOn


class TestFingerprint:

    def test_equal_quantities_hash_equal(self):
        a = compute_input_fingerprint(("qty",), {"qty": Decimal("2.50")})
        b = compute_input_fingerprint(("qty",), {"qty": Decimal("2.5")})
        assert a == b
        assert len(a) == 16

    def test_mapping_order_irrelevant(self):
        a = compute_input_fingerprint(("m",), {"m": {"x": 1, "y": 2}})
        b = compute_input_fingerprint(("m",), {"m": {"y": 2, "x": 1}})
        assert a == b

    def test_missing_field_is_null(self):
        assert compute_input_fingerprint(("absent",), {}) == compute_input_fingerprint(
            ("absent",), {"absent": None}
        )

    def test_different_inputs_differ(self):
        line = PricedLine(unit_price=Decimal("10"), quantity=Decimal("1"))
        other = PricedLine(unit_price=Decimal("10"), quantity=Decimal("2"))
        assert compute_input_fingerprint(("l",), {"l": [line]}) != compute_input_fingerprint(
            ("l",), {"l": [other]}
        )


class TestTracedEngine:

    def test_trace_emitted(self, captured_logs):
        compute_total(
            [PricedLine(unit_price=Decimal("10"), quantity=Decimal("3"))],
            [AddOn("Freight", Decimal("5"))],
        )

        traces = [r for r in captured_logs() if r["message"] == "INVENTORY_ENGINE_TRACE"]
        assert traces[-1]["engine_name"] == "bill_totals"
        assert traces[-1]["function"] == "compute_total"
        assert len(traces[-1]["input_fingerprint"]) == 16

    def test_positional_and_keyword_calls_fingerprint_alike(self, captured_logs):
        @traced_engine("demo", "1.0", fingerprint_fields=("a", "b"))
        def add(a, b):
            return a + b

        assert add(1, 2) == 3
        assert add(a=1, b=2) == 3

        fps = [
            r["input_fingerprint"]
            for r in captured_logs()
            if r["message"] == "INVENTORY_ENGINE_TRACE" and r["engine_name"] == "demo"
        ]
        assert len(fps) == 2
        assert fps[0] == fps[1]
