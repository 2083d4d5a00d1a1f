from __future__ import annotations

from ..extensions import db
from cadeau.time_utils import format_cents


class GiftType(db.Model):
    """
    Purchasable gift definition (a coffee, a beer, a cinema ticket).

    Immutable once created except for is_active. Prices are stored in cents.
    Purchases and inventory reference gift types by id only.
    """
    __tablename__ = "gift_types"
    __table_args__ = (
        db.Index("ix_gift_types_category_name", "category", "name"),
        db.CheckConstraint("price_cents >= 0", name="ck_gift_types_price_nonnegative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    emoji = db.Column(db.String(16), nullable=False)
    description = db.Column(db.Text, nullable=True)

    # Authoritative storage in cents
    price_cents = db.Column(db.Integer, nullable=False)

    category = db.Column(db.String(64), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<GiftType id={self.id} name={self.name!r} category={self.category}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "emoji": self.emoji,
            "description": self.description,
            "price": format_cents(self.price_cents),
            "price_cents": self.price_cents,
            "category": self.category,
            "is_active": self.is_active,
        }
