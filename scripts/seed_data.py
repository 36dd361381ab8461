#!/usr/bin/env python3
"""
Seed the database with a small hardware-store catalog and some activity.

Drops all tables, recreates them, registers a user, a party, categories and
products, applies a handful of stock movements and raises one invoice.

The database comes from the active configuration (INVENTORY_CONFIG /
DATABASE_URL); the packaged default is an in-memory SQLite database, so
pass --config or set DATABASE_URL to keep the data.

Usage:
    python3 scripts/seed_data.py
    python3 scripts/seed_data.py --config inventory.yaml
"""

import argparse
import sys
from decimal import Decimal
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--config", help="Override YAML merged over the defaults")
    args = parser.parse_args()

    from inventory_config import get_active_config
    from inventory_kernel.db.engine import (
        create_tables,
        drop_tables,
        get_session,
        init_engine_from_url,
    )
    from inventory_kernel.db.immutability import register_immutability_listeners
    from inventory_kernel.domain.dtos import (
        AddOn,
        BillItemInput,
        BillKind,
        MovementLine,
        MovementType,
        SupplyDetails,
    )
    from inventory_kernel.logging_config import configure_logging
    from inventory_kernel.models.party import Party
    from inventory_kernel.models.user import User
    from inventory_kernel.selectors.catalog_selector import CatalogSelector
    from inventory_kernel.services.catalog_service import CatalogService
    from inventory_modules.billing import BillingService
    from inventory_modules.stock import StockLedgerService

    config = get_active_config(args.config)
    configure_logging(level=config.logging.level)

    # -----------------------------------------------------------------
    # 1. Connect + reset
    # -----------------------------------------------------------------
    print()
    print(f"  [1/5] Connecting ({config.source})...")
    db = config.database
    try:
        init_engine_from_url(
            db.url,
            echo=db.echo,
            pool_size=db.pool_size,
            max_overflow=db.max_overflow,
            pool_timeout=db.pool_timeout,
            pool_recycle=db.pool_recycle,
        )
        drop_tables()
        create_tables()
    except Exception as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1
    register_immutability_listeners()

    session = get_session()
    try:
        # -------------------------------------------------------------
        # 2. Reference data
        # -------------------------------------------------------------
        print("  [2/5] Creating user, party and catalog...")
        user = User(email="storekeeper@example.com", name="Store Keeper", user_type="admin")
        session.add(user)
        session.flush()
        party = Party(
            name="Brahmaputra Traders",
            address="GS Road, Guwahati",
            state="Assam",
            state_code="18",
            gst_number="18AABCB1234C1Z5",
            created_by_id=user.id,
        )
        session.add(party)

        catalog = CatalogService(session)
        tiles = catalog.create_category("Tiles")
        building = catalog.create_category("Building Material")
        floor_tiles = catalog.create_product(
            "Floor Tiles 600x600", "pcs", "59", user.id,
            hsn_code="6907", gst_slab=18, category_id=tiles.id,
            opening_stock=100, sub_unit="boxes", sub_unit_conversion_rate=4,
        )
        cement = catalog.create_product(
            "Cement 50kg", "bags", "380", user.id,
            hsn_code="2523", gst_slab=28, category_id=building.id, opening_stock=40,
        )
        rods = catalog.create_product(
            "TMT Rod 12mm", "kg", "72", user.id,
            hsn_code="7214", gst_slab=18, category_id=building.id, opening_stock=500,
        )
        session.commit()

        # -------------------------------------------------------------
        # 3. Stock movements
        # -------------------------------------------------------------
        print("  [3/5] Applying stock movements...")
        ledger = StockLedgerService(session, policy=config.ledger)
        ledger.apply_movement(
            MovementType.RECEIPT,
            [MovementLine(floor_tiles.id, Decimal("6"), is_sub_unit=True)],
            created_by=user.id,
            notes="Supplier delivery",
        )
        ledger.apply_movement(
            MovementType.ISSUE,
            [MovementLine(cement.id, Decimal("22")), MovementLine(rods.id, Decimal("120"))],
            created_by=user.id,
            notes="Site dispatch",
        )
        ledger.apply_movement(
            MovementType.CORRECTION,
            [MovementLine(rods.id, Decimal("375"))],
            created_by=user.id,
            notes="Stock count",
        )

        # -------------------------------------------------------------
        # 4. Invoice
        # -------------------------------------------------------------
        print("  [4/5] Raising an invoice...")
        billing = BillingService(session, policy=config.billing, ledger_policy=config.ledger)
        bill = billing.create_bill(
            BillKind.INVOICE,
            party.id,
            [
                BillItemInput(floor_tiles.id, Decimal("2"), is_sub_unit=True),
                BillItemInput(cement.id, Decimal("5"), discount_percentage=Decimal("5")),
            ],
            created_by=user.id,
            supply=SupplyDetails(supply_place="Guwahati", vehicle_number="AS01AB1234"),
            add_ons=[AddOn("Freight", Decimal("300"))],
        )
        breakup = billing.tax_breakup(bill.bill_id)

        # -------------------------------------------------------------
        # 5. Summary
        # -------------------------------------------------------------
        print("  [5/5] Done.")
        print()
        print(f"  {bill.bill_number}  total {bill.total_amount}  grand {breakup.grand_total}")
        print(f"  {breakup.amount_in_words}")
        for product in CatalogSelector(session).low_stock_products(
            config.catalog.low_stock_threshold
        ):
            print(f"  low stock: {product.name} ({product.current_stock} {product.unit.value})")
        print()
    except Exception as exc:
        session.rollback()
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1
    finally:
        session.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
