"""Database layer - engine, declarative bases and column types."""

from inventory_kernel.db.base import Base, TrackedBase
from inventory_kernel.db.engine import create_tables, get_engine, get_session, session_scope
from inventory_kernel.db.types import Money, StockQuantity, UnitCode, UUIDString

__all__ = [
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "Money",
    "StockQuantity",
    "UnitCode",
]
