# Overview: Partner (redeeming party) provisioning, API-key auth and statistics.

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import GiftTransaction, GiftType, Partner, STATUS_REDEEMED
from ..validation import ConflictError
from cadeau.time_utils import to_utc_z, format_cents
from .session_service import generate_token, hash_token

logger = logging.getLogger(__name__)

PARTNER_STATUS_PENDING = "pending"
PARTNER_STATUS_ACTIVE = "active"


def create_partner(
    *,
    business_name: str,
    owner_name: str,
    email: str,
    phone: str | None = None,
    address: str | None = None,
    city: str | None = None,
    business_type: str | None = None,
    active: bool = False,
) -> tuple[Partner, str]:
    """
    Provision a partner.

    Returns (partner, plaintext_api_key); only the key hash is stored.
    """
    api_key = generate_token()
    partner = Partner(
        business_name=business_name,
        owner_name=owner_name,
        email=email.strip().lower(),
        phone=phone,
        address=address,
        city=city,
        business_type=business_type,
        status=PARTNER_STATUS_ACTIVE if active else PARTNER_STATUS_PENDING,
        api_key_hash=hash_token(api_key),
    )
    db.session.add(partner)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Partner email already registered")

    logger.info("partner %s provisioned (status=%s)", partner.id, partner.status)
    return partner, api_key


def set_partner_status(partner_id: int, status: str) -> Partner | None:
    if status not in (PARTNER_STATUS_PENDING, PARTNER_STATUS_ACTIVE):
        raise ValueError(f"unknown partner status: {status}")
    partner = db.session.get(Partner, partner_id)
    if partner is None:
        return None
    partner.status = status
    db.session.commit()
    return partner


def authenticate_partner(api_key: str | None) -> Partner | None:
    if not api_key:
        return None
    return db.session.query(Partner).filter_by(api_key_hash=hash_token(api_key)).first()


def get_partner_stats(partner_id: int, recent_limit: int = 10) -> dict:
    """Redemption counts and value for one partner."""
    per_gift = db.session.execute(
        select(
            GiftType.id,
            GiftType.name,
            GiftType.emoji,
            func.count(GiftTransaction.id),
            func.coalesce(func.sum(GiftType.price_cents), 0),
        )
        .join(GiftType, GiftTransaction.gift_type_id == GiftType.id)
        .where(
            GiftTransaction.partner_id == partner_id,
            GiftTransaction.status == STATUS_REDEEMED,
        )
        .group_by(GiftType.id, GiftType.name, GiftType.emoji)
        .order_by(func.count(GiftTransaction.id).desc(), GiftType.name)
    ).all()

    recent = db.session.execute(
        select(GiftTransaction.id, GiftTransaction.redeemed_at, GiftType.name, GiftType.emoji)
        .join(GiftType, GiftTransaction.gift_type_id == GiftType.id)
        .where(
            GiftTransaction.partner_id == partner_id,
            GiftTransaction.status == STATUS_REDEEMED,
        )
        .order_by(GiftTransaction.redeemed_at.desc())
        .limit(recent_limit)
    ).all()

    total_count = sum(row[3] for row in per_gift)
    total_cents = sum(int(row[4]) for row in per_gift)

    return {
        "partner_id": partner_id,
        "total_redemptions": total_count,
        "total_value": format_cents(total_cents),
        "total_value_cents": total_cents,
        "by_gift_type": [
            {
                "gift_type_id": gift_type_id,
                "name": name,
                "emoji": emoji,
                "count": count,
                "value_cents": int(value_cents),
            }
            for gift_type_id, name, emoji, count, value_cents in per_gift
        ],
        "recent": [
            {
                "transaction_id": tx_id,
                "redeemed_at": to_utc_z(redeemed_at),
                "name": name,
                "emoji": emoji,
            }
            for tx_id, redeemed_at, name, emoji in recent
        ],
    }
