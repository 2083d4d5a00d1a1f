# Overview: Purchase processor; credits inventory and writes the receipt atomically.

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy.orm import Session

from ..models import Purchase, PurchaseLine
from .catalog_service import CatalogStore
from .concurrency import UNIQUE_RACE_ERRORS, run_with_retry, unit_of_work
from .errors import InvalidItemError
from .inventory_service import InventoryLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PurchaseItem:
    gift_type_id: int
    quantity: int


class PurchaseProcessor:
    """
    Turns a cart into inventory.

    Every line is validated and priced before the first credit is written,
    and all credits plus the receipt commit together. An invalid line means
    no inventory change and no receipt.
    """

    def __init__(self, session: Session, catalog: CatalogStore, ledger: InventoryLedger):
        self.session = session
        self.catalog = catalog
        self.ledger = ledger

    def _price_items(self, items: list[PurchaseItem]) -> list[tuple[PurchaseItem, int]]:
        if not items:
            raise InvalidItemError("Items are required")

        priced = []
        for item in items:
            quantity = item.quantity
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                raise InvalidItemError(f"Invalid quantity for gift type {item.gift_type_id}")
            gift_type = self.catalog.get_active(item.gift_type_id)
            if gift_type is None:
                raise InvalidItemError(f"Invalid gift type: {item.gift_type_id}")
            priced.append((item, gift_type.price_cents))
        return priced

    def purchase(self, account_id: int, items: Iterable[PurchaseItem]) -> Purchase:
        items = list(items)

        def _op() -> Purchase:
            with unit_of_work(self.session):
                priced = self._price_items(items)

                total_cents = 0
                lines = []
                for position, (item, unit_price_cents) in enumerate(priced):
                    total_cents += unit_price_cents * item.quantity
                    self.ledger.credit(account_id, item.gift_type_id, item.quantity)
                    lines.append(
                        PurchaseLine(
                            position=position,
                            gift_type_id=item.gift_type_id,
                            quantity=item.quantity,
                            unit_price_cents=unit_price_cents,
                        )
                    )

                receipt = Purchase(
                    id=uuid.uuid4().hex,
                    account_id=account_id,
                    total_cents=total_cents,
                    lines=lines,
                )
                self.session.add(receipt)
                self.session.flush()
            return receipt

        receipt = run_with_retry(self.session, _op, retry_on=UNIQUE_RACE_ERRORS)
        logger.info(
            "purchase %s recorded for account %s: %d line(s), %d cents",
            receipt.id, account_id, len(items), receipt.total_cents,
        )
        return receipt
