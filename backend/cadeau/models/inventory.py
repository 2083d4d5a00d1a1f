from __future__ import annotations

from ..extensions import db


class InventoryEntry(db.Model):
    """
    Unredeemed units of one gift type held by one account.

    INVARIANTS:
    - One row per (account_id, gift_type_id), created on first purchase.
    - quantity >= 0; rows are decremented to zero, never deleted.
    - Mutated only through conditional UPDATEs in InventoryLedger.
    """
    __tablename__ = "inventory_entries"
    __table_args__ = (
        db.UniqueConstraint("account_id", "gift_type_id", name="uq_inventory_account_gift"),
        db.CheckConstraint("quantity >= 0", name="ck_inventory_quantity_nonnegative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=False, index=True)
    gift_type_id = db.Column(db.Integer, db.ForeignKey("gift_types.id"), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return (
            f"<InventoryEntry account_id={self.account_id} "
            f"gift_type_id={self.gift_type_id} quantity={self.quantity}>"
        )
