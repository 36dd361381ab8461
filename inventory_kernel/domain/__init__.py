"""
Pure domain layer.

Data transfer objects, value objects and the clock abstraction, with NO
dependencies on the ORM, the database or I/O.  All domain objects are
immutable.
"""

from inventory_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from inventory_kernel.domain.dtos import (
    AddOn,
    BillItemInput,
    BillKind,
    CategoryInfo,
    MovementLine,
    MovementType,
    PartyInfo,
    ProductSnapshot,
    SupplyDetails,
    UserInfo,
)
from inventory_kernel.domain.values import Quantity, SubUnit, Unit

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "AddOn",
    "BillItemInput",
    "BillKind",
    "CategoryInfo",
    "MovementLine",
    "MovementType",
    "PartyInfo",
    "ProductSnapshot",
    "SupplyDetails",
    "UserInfo",
    "Quantity",
    "SubUnit",
    "Unit",
]
