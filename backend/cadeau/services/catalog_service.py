# Overview: Read-mostly gift catalog; pricing source for purchases.

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import GiftType

logger = logging.getLogger(__name__)


DEFAULT_GIFT_TYPES = [
    # Drinks
    {"name": "Biertje", "emoji": "🍺", "description": "Een lekker biertje bij deelnemende cafés", "price_cents": 350, "category": "drinks"},
    {"name": "Wijntje", "emoji": "🍷", "description": "Een glas wijn bij restaurants", "price_cents": 450, "category": "drinks"},
    {"name": "Koffie", "emoji": "☕", "description": "Verse koffie bij coffeeshops", "price_cents": 275, "category": "drinks"},
    {"name": "Cocktail", "emoji": "🍸", "description": "Een cocktail naar keuze", "price_cents": 750, "category": "drinks"},
    # Food
    {"name": "Pizza Slice", "emoji": "🍕", "description": "Een punt pizza bij pizzeria", "price_cents": 325, "category": "food"},
    {"name": "Taartje", "emoji": "🍰", "description": "Een stuk taart bij bakkerij", "price_cents": 375, "category": "food"},
    {"name": "Lunch", "emoji": "🥪", "description": "Lunch deal bij restaurants", "price_cents": 850, "category": "food"},
    {"name": "IJsje", "emoji": "🍨", "description": "Een bolletje ijs naar keuze", "price_cents": 225, "category": "food"},
    # Entertainment
    {"name": "Bioscoopkaartje", "emoji": "🎬", "description": "Ticket voor voorstelling", "price_cents": 1250, "category": "entertainment"},
    {"name": "Minigolf", "emoji": "⛳", "description": "Een rondje minigolf", "price_cents": 700, "category": "entertainment"},
    {"name": "Bowling Game", "emoji": "🎳", "description": "Een spelletje bowlen", "price_cents": 550, "category": "entertainment"},
    # Lifestyle
    {"name": "Boodschappen", "emoji": "🛒", "description": "Boodschappen tegoed", "price_cents": 1000, "category": "lifestyle"},
    {"name": "Bloemen", "emoji": "💐", "description": "Een mooi boeket bloemen", "price_cents": 1200, "category": "lifestyle"},
]


class CatalogStore:
    """Gift type lookups. Only is_active is ever changed after creation."""

    def __init__(self, session: Session):
        self.session = session

    def list_active(self) -> list[GiftType]:
        stmt = (
            select(GiftType)
            .where(GiftType.is_active.is_(True))
            .order_by(GiftType.category, GiftType.name)
        )
        return list(self.session.scalars(stmt))

    def list_all(self) -> list[GiftType]:
        stmt = select(GiftType).order_by(GiftType.category, GiftType.name)
        return list(self.session.scalars(stmt))

    def get(self, gift_type_id: int) -> GiftType | None:
        return self.session.get(GiftType, gift_type_id)

    def get_active(self, gift_type_id: int) -> GiftType | None:
        """Missing and inactive gift types are indistinguishable here."""
        gift_type = self.get(gift_type_id)
        if gift_type is None or not gift_type.is_active:
            return None
        return gift_type

    def set_active(self, gift_type_id: int, active: bool) -> GiftType | None:
        gift_type = self.get(gift_type_id)
        if gift_type is None:
            return None
        gift_type.is_active = active
        self.session.commit()
        logger.info("gift type %s active=%s", gift_type_id, active)
        return gift_type

    def seed_defaults(self) -> int:
        """Insert the default catalog into an empty table. Returns rows inserted."""
        if self.session.scalar(select(GiftType.id).limit(1)) is not None:
            return 0
        for row in DEFAULT_GIFT_TYPES:
            self.session.add(GiftType(**row))
        self.session.commit()
        logger.info("seeded %d default gift types", len(DEFAULT_GIFT_TYPES))
        return len(DEFAULT_GIFT_TYPES)
