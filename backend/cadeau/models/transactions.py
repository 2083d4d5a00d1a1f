from __future__ import annotations

from ..extensions import db
from cadeau.time_utils import to_utc_z


STATUS_ISSUED = "issued"
STATUS_REDEEMED = "redeemed"


class GiftTransaction(db.Model):
    """
    One transferred gift unit, tracked from issuance to redemption.

    LIFECYCLE:
    1. issued: unit debited from the sender, redemption code minted
    2. redeemed: code consumed by a partner (terminal)

    The redemption code is random and unrelated to the transaction id.
    The issued -> redeemed transition is a single conditional UPDATE
    (see GiftEngine.redeem).
    """
    __tablename__ = "gift_transactions"
    __table_args__ = (
        db.UniqueConstraint("redemption_code", name="uq_gift_transactions_code"),
        db.Index("ix_gift_transactions_sender_created", "sender_id", "created_at"),
        db.CheckConstraint("status IN ('issued', 'redeemed')", name="ck_gift_transactions_status"),
    )

    # uuid4 hex
    id = db.Column(db.String(36), primary_key=True)
    sender_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=False)
    receiver_email = db.Column(db.String(255), nullable=True)
    gift_type_id = db.Column(db.Integer, db.ForeignKey("gift_types.id"), nullable=False)
    redemption_code = db.Column(db.String(64), nullable=False)
    message = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(16), nullable=False, default=STATUS_ISSUED, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False)
    redeemed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    partner_id = db.Column(db.Integer, db.ForeignKey("partners.id"), nullable=True, index=True)

    gift_type = db.relationship("GiftType")
    sender = db.relationship("Account")

    def __repr__(self) -> str:
        return f"<GiftTransaction id={self.id} status={self.status}>"

    def to_dict(self) -> dict:
        # redemption_code is deliberately excluded; it is only handed out by send()
        return {
            "transaction_id": self.id,
            "sender_id": self.sender_id,
            "receiver_email": self.receiver_email,
            "gift_type_id": self.gift_type_id,
            "message": self.message,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "redeemed_at": to_utc_z(self.redeemed_at),
            "partner_id": self.partner_id,
        }
