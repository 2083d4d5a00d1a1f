# Overview: Inventory ledger; per-account unit counts per gift type.

from __future__ import annotations

"""
Inventory invariants (authoritative)

- One InventoryEntry per (account, gift type), created lazily by credit().
- quantity never goes negative: debit() is a conditional UPDATE guarded by
  quantity >= n, so a concurrent second debit of the last unit matches no row.
- Neither credit() nor debit() commits; callers own the transaction
  (see unit_of_work).
- query() returns strictly-positive balances ordered by category, then name.
"""

from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..models import GiftType, InventoryEntry
from cadeau.time_utils import format_cents
from .errors import InsufficientBalanceError


@dataclass(frozen=True)
class InventoryLine:
    gift_type_id: int
    name: str
    emoji: str
    description: str | None
    price_cents: int
    category: str
    quantity: int

    def to_dict(self) -> dict:
        return {
            "gift_type_id": self.gift_type_id,
            "name": self.name,
            "emoji": self.emoji,
            "description": self.description,
            "price": format_cents(self.price_cents),
            "price_cents": self.price_cents,
            "category": self.category,
            "quantity": self.quantity,
        }


class InventoryLedger:
    def __init__(self, session: Session):
        self.session = session

    def credit(self, account_id: int, gift_type_id: int, quantity: int) -> None:
        """
        Add units, creating the entry on first purchase.

        A concurrent first-insert for the same pair raises IntegrityError at
        flush; callers retry the whole unit of work.
        """
        if quantity <= 0:
            raise ValueError("credit quantity must be positive")

        stmt = (
            update(InventoryEntry)
            .where(
                InventoryEntry.account_id == account_id,
                InventoryEntry.gift_type_id == gift_type_id,
            )
            .values(quantity=InventoryEntry.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        if result.rowcount:
            return

        self.session.add(
            InventoryEntry(account_id=account_id, gift_type_id=gift_type_id, quantity=quantity)
        )
        self.session.flush()

    def debit(self, account_id: int, gift_type_id: int, quantity: int = 1) -> None:
        """Remove units or raise InsufficientBalanceError without touching state."""
        if quantity <= 0:
            raise ValueError("debit quantity must be positive")

        stmt = (
            update(InventoryEntry)
            .where(
                InventoryEntry.account_id == account_id,
                InventoryEntry.gift_type_id == gift_type_id,
                InventoryEntry.quantity >= quantity,
            )
            .values(quantity=InventoryEntry.quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        if result.rowcount != 1:
            raise InsufficientBalanceError("You do not have this gift available")

    def balance(self, account_id: int, gift_type_id: int) -> int:
        stmt = select(InventoryEntry.quantity).where(
            InventoryEntry.account_id == account_id,
            InventoryEntry.gift_type_id == gift_type_id,
        )
        return int(self.session.scalar(stmt) or 0)

    def query(self, account_id: int) -> list[InventoryLine]:
        stmt = (
            select(
                GiftType.id,
                GiftType.name,
                GiftType.emoji,
                GiftType.description,
                GiftType.price_cents,
                GiftType.category,
                InventoryEntry.quantity,
            )
            .join(GiftType, InventoryEntry.gift_type_id == GiftType.id)
            .where(
                InventoryEntry.account_id == account_id,
                InventoryEntry.quantity > 0,
            )
            .order_by(GiftType.category, GiftType.name)
        )
        return [InventoryLine(*row) for row in self.session.execute(stmt)]
