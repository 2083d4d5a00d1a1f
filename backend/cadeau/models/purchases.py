from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.orm import object_session

from ..extensions import db
from cadeau.time_utils import to_utc_z, format_cents


class ImmutableReceiptError(RuntimeError):
    """Raised when code tries to rewrite an append-only purchase receipt."""


class Purchase(db.Model):
    """
    Purchase receipt.

    Append-only audit record: written once in the same DB transaction as the
    inventory credits it describes, never updated or deleted.
    """
    __tablename__ = "purchases"
    __table_args__ = (
        db.Index("ix_purchases_account_created", "account_id", "created_at"),
    )

    # uuid4 hex
    id = db.Column(db.String(36), primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=False)
    total_cents = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(16), nullable=False, default="completed")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    lines = db.relationship(
        "PurchaseLine",
        order_by="PurchaseLine.position",
        lazy="selectin",
    )

    def to_dict(self) -> dict:
        return {
            "purchase_id": self.id,
            "account_id": self.account_id,
            "total_amount": format_cents(self.total_cents),
            "total_amount_cents": self.total_cents,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "items": [line.to_dict() for line in self.lines],
        }


class PurchaseLine(db.Model):
    """One (gift type, quantity) pair of a receipt, in request order."""
    __tablename__ = "purchase_lines"
    __table_args__ = (
        db.UniqueConstraint("purchase_id", "position", name="uq_purchase_lines_position"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    purchase_id = db.Column(db.String(36), db.ForeignKey("purchases.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)
    gift_type_id = db.Column(db.Integer, db.ForeignKey("gift_types.id"), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)

    # Price captured at purchase time
    unit_price_cents = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "gift_type_id": self.gift_type_id,
            "quantity": self.quantity,
            "unit_price": format_cents(self.unit_price_cents),
            "unit_price_cents": self.unit_price_cents,
        }


@event.listens_for(Purchase, "before_update")
@event.listens_for(PurchaseLine, "before_update")
def _reject_receipt_update(mapper, connection, target):
    session = object_session(target)
    if session is not None and not session.is_modified(target, include_collections=False):
        return
    raise ImmutableReceiptError(f"{mapper.class_.__name__} rows are append-only")


@event.listens_for(Purchase, "before_delete")
@event.listens_for(PurchaseLine, "before_delete")
def _reject_receipt_delete(mapper, connection, target):
    raise ImmutableReceiptError(f"{mapper.class_.__name__} rows are append-only")
