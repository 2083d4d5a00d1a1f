# Overview: Code verifier; read-only preview of a gift behind a code or transaction id.

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ..models import Account, GiftTransaction, GiftType, STATUS_REDEEMED
from cadeau.time_utils import to_utc_z, format_cents
from .code_service import normalize_reference
from .errors import GiftNotFoundError


@dataclass(frozen=True)
class GiftPreview:
    transaction_id: str
    status: str
    name: str
    emoji: str
    description: str | None
    price_cents: int
    message: str | None
    sender_name: str
    created_at: datetime | None
    redeemed_at: datetime | None
    redemption_code: str

    @property
    def is_redeemed(self) -> bool:
        return self.status == STATUS_REDEEMED

    def to_dict(self) -> dict:
        return {
            "id": self.transaction_id,
            "status": self.status,
            "name": self.name,
            "emoji": self.emoji,
            "description": self.description,
            "price": format_cents(self.price_cents),
            "message": self.message,
            "sender_name": self.sender_name,
            "created_at": to_utc_z(self.created_at),
            "redeemed_at": to_utc_z(self.redeemed_at),
        }


class CodeVerifier:
    """
    Resolves a code to what the gift is, without changing its status.

    Unknown, blank and malformed references all raise the same
    GiftNotFoundError so responses give no enumeration signal.
    """

    def __init__(self, session: Session):
        self.session = session

    def preview(self, reference: str | None) -> GiftPreview:
        ref = normalize_reference(reference)
        if ref is None or len(ref) > 64:
            raise GiftNotFoundError()

        stmt = (
            select(
                GiftTransaction.id,
                GiftTransaction.status,
                GiftType.name,
                GiftType.emoji,
                GiftType.description,
                GiftType.price_cents,
                GiftTransaction.message,
                Account.name,
                GiftTransaction.created_at,
                GiftTransaction.redeemed_at,
                GiftTransaction.redemption_code,
            )
            .join(GiftType, GiftTransaction.gift_type_id == GiftType.id)
            .join(Account, GiftTransaction.sender_id == Account.id)
            .where(or_(GiftTransaction.redemption_code == ref, GiftTransaction.id == ref))
        )
        row = self.session.execute(stmt).first()
        if row is None:
            raise GiftNotFoundError()
        return GiftPreview(*row)
