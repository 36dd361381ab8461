"""
SequenceService -- gap-tolerant, never-repeating counters for bill numbers.

BillingService asks for the next serial of a named sequence, one per bill
kind and financial year (``bill_number:invoice:2024-25``), and formats it
into the printed number (``INV-2024-25-0007``).

Invariants enforced:
    - The next serial comes from the sequence's counter row, read under
      ``SELECT ... FOR UPDATE``; it is never derived from the highest bill
      number on file.
    - A serial is only consumed when the caller commits.  A rolled-back
      bill hands its serial to the next bill.
    - Flush-only: the caller owns the transaction.

Failure modes:
    - ValueError for an empty sequence name.
    - IntegrityError escapes only if a counter row created concurrently
      cannot be read back after the clash.

Backend notes:
    SQLite ignores FOR UPDATE and serializes writers on the whole database
    instead.  Creating a counter there uses a savepoint whose release ends
    pysqlite's implicit transaction, so the first serial of a new sequence
    survives a later rollback and leaves a gap.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.sequence import SequenceCounter

logger = get_logger("services.sequence")


class SequenceService:
    """Named counters backed by the ``sequence_counters`` table."""

    def __init__(self, session: Session):
        self._session = session

    def next_value(self, sequence_name: str) -> int:
        """
        Lock, increment and return the named counter (first value is 1).
        """
        if not sequence_name:
            raise ValueError("sequence_name is required")

        counter = self._lock(sequence_name)
        if counter is None:
            counter, created = self._create(sequence_name)
            if created:
                self._allocated(sequence_name, 1)
                return 1

        counter.current_value += 1
        self._session.flush()
        self._allocated(sequence_name, counter.current_value)
        return counter.current_value

    def current_value(self, sequence_name: str) -> int | None:
        """Last value handed out, or None for a sequence never used."""
        return self._session.scalar(
            select(SequenceCounter.current_value).where(
                SequenceCounter.name == sequence_name
            )
        )

    def reset(self, sequence_name: str, value: int = 0) -> None:
        """
        Set a counter so the next serial is ``value + 1``.

        For tests and data repair only; reusing serials duplicates bill
        numbers.
        """
        counter = self._lock(sequence_name)
        if counter is None:
            self._session.add(SequenceCounter(name=sequence_name, current_value=value))
        else:
            counter.current_value = value
        self._session.flush()
        logger.warning(
            "sequence_reset", extra={"sequence_name": sequence_name, "value": value}
        )

    def _lock(self, sequence_name: str) -> SequenceCounter | None:
        return self._session.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def _create(self, sequence_name: str) -> tuple[SequenceCounter, bool]:
        """
        Insert the counter at 1, or lock the row a concurrent caller just
        inserted.  The flag tells which happened.
        """
        savepoint = self._session.begin_nested()
        try:
            counter = SequenceCounter(name=sequence_name, current_value=1)
            self._session.add(counter)
            self._session.flush()
            savepoint.commit()
            return counter, True
        except IntegrityError:
            savepoint.rollback()
            logger.debug(
                "sequence_counter_race_retry", extra={"sequence_name": sequence_name}
            )
            counter = self._lock(sequence_name)
            if counter is None:
                raise
            return counter, False

    def _allocated(self, sequence_name: str, value: int) -> None:
        logger.debug(
            "sequence_allocated", extra={"sequence_name": sequence_name, "value": value}
        )
