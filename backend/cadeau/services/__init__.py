# Overview: Wiring for the gift lifecycle components around one storage handle.

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Any

from sqlalchemy.orm import Session

from .catalog_service import CatalogStore
from .gift_service import GiftEngine
from .inventory_service import InventoryLedger
from .purchase_service import PurchaseProcessor
from .verification_service import CodeVerifier


@dataclass(frozen=True)
class Lifecycle:
    catalog: CatalogStore
    ledger: InventoryLedger
    purchases: PurchaseProcessor
    gifts: GiftEngine
    verifier: CodeVerifier


def build_lifecycle(session: Session, config: Mapping[str, Any] | None = None) -> Lifecycle:
    """Construct every lifecycle component on the given session."""
    config = config or {}
    catalog = CatalogStore(session)
    ledger = InventoryLedger(session)
    return Lifecycle(
        catalog=catalog,
        ledger=ledger,
        purchases=PurchaseProcessor(session, catalog, ledger),
        gifts=GiftEngine(
            session,
            ledger,
            catalog,
            code_prefix=config.get("REDEMPTION_CODE_PREFIX", "CADEAU"),
            claim_base_url=config.get("CLAIM_BASE_URL", "https://cadeautjes.app/claim"),
        ),
        verifier=CodeVerifier(session),
    )
