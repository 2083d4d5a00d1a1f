from __future__ import annotations

from ..extensions import db
from cadeau.time_utils import to_utc_z


class Account(db.Model):
    """
    Gift buyers and senders.

    Email is globally unique and is the login identifier. The credential
    hash is bcrypt and is never serialized.
    """
    __tablename__ = "accounts"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_accounts_email"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(120), nullable=False)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    # Last device that synced the keyboard inventory
    device_id = db.Column(db.String(128), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Account id={self.id} email={self.email!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "device_id": self.device_id,
            "created_at": to_utc_z(self.created_at),
            "last_login_at": to_utc_z(self.last_login_at),
        }


class SessionToken(db.Model):
    """
    Bearer session for an account.

    Only the SHA-256 of the token is stored; the plaintext goes to the client once.
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_account", "account_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=False)
    token_hash = db.Column(db.String(64), nullable=False, unique=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)

    account = db.relationship("Account")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "created_at": to_utc_z(self.created_at),
            "expires_at": to_utc_z(self.expires_at),
        }


class Partner(db.Model):
    """
    Merchant that honors redemption codes.

    STATUS:
    - pending: provisioned, cannot redeem yet
    - active: may redeem codes with its API key
    """
    __tablename__ = "partners"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_partners_email"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_name = db.Column(db.String(255), nullable=False)
    owner_name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(64), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(120), nullable=True)
    business_type = db.Column(db.String(64), nullable=True)

    status = db.Column(db.String(16), nullable=False, default="pending")

    # SHA-256 of the partner API key
    api_key_hash = db.Column(db.String(64), nullable=False, unique=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Partner id={self.id} business_name={self.business_name!r} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_name": self.business_name,
            "owner_name": self.owner_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "city": self.city,
            "business_type": self.business_type,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
        }
