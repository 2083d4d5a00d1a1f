# Overview: Transfer & redemption engine; owns the issued -> redeemed state machine.

from __future__ import annotations

"""
Gift lifecycle invariants (authoritative)

send():
- Debit of one unit and creation of the issued GiftTransaction commit
  together or not at all. A failure after the debit rolls the debit back.
- The debit is a conditional UPDATE (quantity >= 1), so two concurrent sends
  of the last unit cannot both succeed.

redeem():
- issued -> redeemed is the only transition and is terminal.
- The transition is one conditional UPDATE ... WHERE status = 'issued'.
  Concurrent redeemers race inside the database; exactly one matches the row,
  the others see zero affected rows and get AlreadyRedeemedError.
- redeemed_at and partner_id are written by that same statement, so a second
  attempt can never move them.
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from ..models import GiftTransaction, GiftType, STATUS_ISSUED, STATUS_REDEEMED
from cadeau.time_utils import utcnow, to_utc_z, format_cents
from .catalog_service import CatalogStore
from .code_service import generate_redemption_code, normalize_reference, qr_data_url
from .concurrency import UNIQUE_RACE_ERRORS, run_with_retry, unit_of_work
from .errors import AlreadyRedeemedError, GiftNotFoundError, InvalidItemError
from .inventory_service import InventoryLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SendResult:
    transaction: GiftTransaction
    redemption_code: str
    gift_type: GiftType
    claim_url: str

    def to_dict(self) -> dict:
        return {
            "transaction_id": self.transaction.id,
            "status": self.transaction.status,
            "gift": {
                "id": self.gift_type.id,
                "name": self.gift_type.name,
                "emoji": self.gift_type.emoji,
                "description": self.gift_type.description,
            },
            "redemption_code": self.redemption_code,
            "qr_code": qr_data_url(self.redemption_code),
            "claim_url": self.claim_url,
        }


def _masked(code: str) -> str:
    return f"{code[:-4]}****" if len(code) > 8 else "****"


def _history_entry(tx: GiftTransaction, gift_type: GiftType) -> dict:
    return {
        "transaction_id": tx.id,
        "receiver_email": tx.receiver_email,
        "status": tx.status,
        "message": tx.message,
        "created_at": to_utc_z(tx.created_at),
        "redeemed_at": to_utc_z(tx.redeemed_at),
        "gift": {
            "id": gift_type.id,
            "name": gift_type.name,
            "emoji": gift_type.emoji,
            "description": gift_type.description,
            "price": format_cents(gift_type.price_cents),
        },
    }


class GiftEngine:
    def __init__(
        self,
        session: Session,
        ledger: InventoryLedger,
        catalog: CatalogStore,
        *,
        code_prefix: str = "CADEAU",
        claim_base_url: str = "https://cadeautjes.app/claim",
    ):
        self.session = session
        self.ledger = ledger
        self.catalog = catalog
        self.code_prefix = code_prefix
        self.claim_base_url = claim_base_url.rstrip("/")

    def claim_url(self, transaction_id: str) -> str:
        return f"{self.claim_base_url}/{transaction_id}"

    def send(
        self,
        sender_id: int,
        gift_type_id: int,
        receiver_email: str | None = None,
        message: str | None = None,
    ) -> SendResult:
        """
        Move one unit out of the sender's inventory into a new issued transaction.

        Raises InsufficientBalanceError when the sender holds no unit,
        InvalidItemError when the gift type does not exist.
        """
        def _op() -> tuple[GiftTransaction, GiftType]:
            with unit_of_work(self.session):
                # Debit first: the write lock is taken before anything else is read
                self.ledger.debit(sender_id, gift_type_id, 1)

                gift_type = self.catalog.get(gift_type_id)
                if gift_type is None:
                    raise InvalidItemError(f"Invalid gift type: {gift_type_id}")

                tx = GiftTransaction(
                    id=uuid.uuid4().hex,
                    sender_id=sender_id,
                    receiver_email=receiver_email,
                    gift_type_id=gift_type_id,
                    redemption_code=generate_redemption_code(self.code_prefix),
                    message=message,
                    status=STATUS_ISSUED,
                    created_at=utcnow(),
                )
                self.session.add(tx)
                self.session.flush()
            return tx, gift_type

        # A redemption-code collision is retried with a freshly minted code
        tx, gift_type = run_with_retry(self.session, _op, retry_on=UNIQUE_RACE_ERRORS)
        logger.info("gift sent: transaction %s from account %s", tx.id, sender_id)
        return SendResult(
            transaction=tx,
            redemption_code=tx.redemption_code,
            gift_type=gift_type,
            claim_url=self.claim_url(tx.id),
        )

    def redeem(self, reference: str, partner_id: int | None = None) -> GiftTransaction:
        """
        Consume a redemption code (or transaction id) exactly once.

        Raises GiftNotFoundError for unknown references and
        AlreadyRedeemedError when the transaction is already terminal.
        """
        ref = normalize_reference(reference)
        if ref is None:
            raise GiftNotFoundError()

        matches_ref = or_(GiftTransaction.redemption_code == ref, GiftTransaction.id == ref)

        def _op() -> GiftTransaction:
            with unit_of_work(self.session):
                stmt = (
                    update(GiftTransaction)
                    .where(matches_ref, GiftTransaction.status == STATUS_ISSUED)
                    .values(status=STATUS_REDEEMED, redeemed_at=utcnow(), partner_id=partner_id)
                    .execution_options(synchronize_session=False)
                )
                result = self.session.execute(stmt)
                if result.rowcount != 1:
                    exists = self.session.scalar(select(GiftTransaction.id).where(matches_ref))
                    if exists is None:
                        raise GiftNotFoundError()
                    raise AlreadyRedeemedError()

                tx = self.session.scalars(
                    select(GiftTransaction)
                    .where(matches_ref)
                    .execution_options(populate_existing=True)
                ).one()
            return tx

        try:
            tx = run_with_retry(self.session, _op)
        except (GiftNotFoundError, AlreadyRedeemedError) as exc:
            logger.warning("redemption rejected for %s: %s", _masked(ref), exc.code)
            raise
        logger.info("gift redeemed: transaction %s by partner %s", tx.id, partner_id)
        return tx

    def sent_history(self, sender_id: int, limit: int | None = None) -> list[dict]:
        """Sender's transactions, newest first, with gift summary and current status."""
        stmt = (
            select(GiftTransaction, GiftType)
            .join(GiftType, GiftTransaction.gift_type_id == GiftType.id)
            .where(GiftTransaction.sender_id == sender_id)
            .order_by(GiftTransaction.created_at.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return [_history_entry(tx, gift_type) for tx, gift_type in self.session.execute(stmt)]
