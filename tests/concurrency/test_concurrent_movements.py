"""
Concurrent stock movement tests.

Several workers apply movements to the same products at once, each with its
own session.  Stock is written with a relative UPDATE
(current_stock = current_stock + delta), so no increment may be lost.

Uses a file-backed SQLite database (in-memory SQLite shares one connection)
unless TEST_DATABASE_URL points somewhere else.

Run with: pytest tests/concurrency -v
Skip with: pytest -m "not slow_locks"
"""

import os
import threading
from decimal import Decimal

import pytest

from inventory_config.schema import BillingPolicy, LedgerPolicy
from inventory_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from inventory_kernel.domain.dtos import BillItemInput, BillKind, MovementLine, MovementType, SupplyDetails
from inventory_kernel.models.party import Party
from inventory_kernel.selectors.catalog_selector import CatalogSelector
from inventory_kernel.services.catalog_service import CatalogService
from inventory_modules.billing.service import BillingService
from inventory_modules.stock.service import StockLedgerService

pytestmark = pytest.mark.slow_locks

WORKERS = 4
MOVEMENTS_PER_WORKER = 5


@pytest.fixture
def file_engine(tmp_path):
    url = os.environ.get("TEST_DATABASE_URL", f"sqlite:///{tmp_path / 'inventory.db'}")
    engine = init_engine_from_url(url)
    create_tables(engine)
    yield engine
    drop_tables(engine)
    reset_engine()


@pytest.fixture
def session_factory(file_engine):
    return get_session_factory()


def _run_workers(target, count=WORKERS):
    errors = []

    def wrapped(worker_no):
        try:
            target(worker_no)
        except Exception as e:  # collected and re-raised in the main thread
            errors.append(e)

    threads = [threading.Thread(target=wrapped, args=(n,)) for n in range(count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=120)
    if errors:
        raise errors[0]


def _create_product(session_factory, actor_id, **kwargs):
    with session_factory() as session:
        product = CatalogService(session).create_product(
            "Cement", "bags", "350", actor_id, **kwargs
        )
        session.commit()
        return product


class TestConcurrentMovements:

    def test_no_lost_receipts(self, session_factory, test_actor_id):
        product = _create_product(session_factory, test_actor_id, opening_stock=100)

        def worker(_):
            with session_factory() as session:
                service = StockLedgerService(session, policy=LedgerPolicy())
                for _ in range(MOVEMENTS_PER_WORKER):
                    service.apply_movement(
                        MovementType.RECEIPT,
                        [MovementLine(product.id, Decimal("2"))],
                        created_by=test_actor_id,
                    )

        _run_workers(worker)

        with session_factory() as session:
            stock = CatalogSelector(session).get_product(product.id).current_stock
        assert stock == Decimal("100") + 2 * WORKERS * MOVEMENTS_PER_WORKER

    def test_receipts_and_issues_interleaved(self, session_factory, test_actor_id):
        product = _create_product(
            session_factory, test_actor_id,
            opening_stock=0, sub_unit="boxes", sub_unit_conversion_rate=10,
        )

        def worker(worker_no):
            movement_type = MovementType.RECEIPT if worker_no % 2 == 0 else MovementType.ISSUE
            with session_factory() as session:
                service = StockLedgerService(session)
                for _ in range(MOVEMENTS_PER_WORKER):
                    service.apply_movement(
                        movement_type,
                        [MovementLine(product.id, Decimal("1"), is_sub_unit=True)],
                        created_by=test_actor_id,
                    )

        _run_workers(worker)

        with session_factory() as session:
            stock = CatalogSelector(session).get_product(product.id).current_stock
        assert stock == Decimal("0")


class TestConcurrentBilling:

    def test_bill_numbers_unique(self, session_factory, file_engine, test_actor_id):
        if file_engine.dialect.name == "sqlite":
            pytest.skip("SQLite has no row locks; counter rows need SELECT ... FOR UPDATE")
        product = _create_product(session_factory, test_actor_id)
        with session_factory() as session:
            party = Party(
                name="Brahmaputra Traders", address="GS Road, Guwahati",
                state="Assam", state_code="18",
                created_by_id=test_actor_id,
            )
            session.add(party)
            session.commit()
            party_id = party.id

        numbers = []
        lock = threading.Lock()

        def worker(_):
            with session_factory() as session:
                service = BillingService(session, policy=BillingPolicy())
                for _ in range(3):
                    result = service.create_bill(
                        BillKind.INVOICE, party_id,
                        [BillItemInput(product.id, Decimal("1"))],
                        created_by=test_actor_id,
                        supply=SupplyDetails(supply_place="Guwahati"),
                    )
                    with lock:
                        numbers.append(result.bill_number)

        _run_workers(worker)

        assert len(numbers) == WORKERS * 3
        assert len(set(numbers)) == len(numbers)
