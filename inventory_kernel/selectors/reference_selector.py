"""
Module: inventory_kernel.selectors.reference_selector
Responsibility: Read access to parties and users, the reference records
    bills and movements point at.
Architecture position: Kernel > Selectors.
"""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select

from inventory_kernel.domain.dtos import PartyInfo, UserInfo
from inventory_kernel.models.party import Party
from inventory_kernel.models.user import User
from inventory_kernel.selectors.base import BaseSelector


class ReferenceSelector(BaseSelector[Party]):
    """Party and user lookups; missing records resolve to None."""

    def get_party(self, party_id: UUID) -> PartyInfo | None:
        party = self.session.get(Party, party_id)
        if party is None:
            return None
        return PartyInfo.from_model(party)

    def get_parties(self, party_ids: Iterable[UUID]) -> dict[UUID, PartyInfo]:
        ids = list(dict.fromkeys(party_ids))
        if not ids:
            return {}
        rows = self.session.scalars(select(Party).where(Party.id.in_(ids))).all()
        return {row.id: PartyInfo.from_model(row) for row in rows}

    def get_user(self, user_id: UUID) -> UserInfo | None:
        user = self.session.get(User, user_id)
        if user is None:
            return None
        return UserInfo.from_model(user)

    def get_users(self, user_ids: Iterable[UUID]) -> dict[UUID, UserInfo]:
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return {}
        rows = self.session.scalars(select(User).where(User.id.in_(ids))).all()
        return {row.id: UserInfo.from_model(row) for row in rows}
