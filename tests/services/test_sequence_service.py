"""
Tests for SequenceService.

Sequence numbers come from a locked counter row, never from MAX()+1 over
the numbered table.
"""

import inspect
import re
from pathlib import Path

import pytest
from sqlalchemy import inspect as sa_inspect

from inventory_kernel.services.sequence_service import SequenceService


@pytest.fixture
def sequences(session) -> SequenceService:
    return SequenceService(session)


class TestNextValue:

    def test_starts_at_one_and_increments(self, sequences, session):
        assert sequences.next_value("bill_number:invoice:2024-25") == 1
        assert sequences.next_value("bill_number:invoice:2024-25") == 2
        assert sequences.next_value("bill_number:invoice:2024-25") == 3
        session.commit()

        assert sequences.current_value("bill_number:invoice:2024-25") == 3

    def test_sequences_are_independent(self, sequences):
        sequences.next_value("bill_number:invoice:2024-25")
        sequences.next_value("bill_number:invoice:2024-25")

        assert sequences.next_value("bill_number:proforma:2024-25") == 1

    def test_unknown_sequence_has_no_current_value(self, sequences):
        assert sequences.current_value("never_used") is None

    def test_empty_name_rejected(self, sequences):
        with pytest.raises(ValueError):
            sequences.next_value("")

    def test_reset(self, sequences, session):
        sequences.next_value("bill_number:invoice:2024-25")
        sequences.reset("bill_number:invoice:2024-25", 41)
        session.commit()

        assert sequences.next_value("bill_number:invoice:2024-25") == 42

    def test_reset_creates_missing_counter(self, sequences):
        sequences.reset("bill_number:quotation:2024-25", 9)
        assert sequences.next_value("bill_number:quotation:2024-25") == 10


class TestImplementation:

    def test_counter_table_exists(self, session):
        inspector = sa_inspect(session.bind)
        assert "sequence_counters" in inspector.get_table_names()
        columns = {c["name"] for c in inspector.get_columns("sequence_counters")}
        assert {"name", "current_value"} <= columns

    def test_next_value_locks_the_counter_row(self):
        source = Path(inspect.getfile(SequenceService)).read_text()
        assert "with_for_update()" in source
        assert not re.search(r"func\.max|MAX\(", source)
