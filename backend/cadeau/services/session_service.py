# Overview: Service-layer operations for session; encapsulates business logic and database work.

"""
Session Token Management Service

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage (fast, one-way)
- Absolute timeout from SESSION_TTL_HOURS
- Revocable on logout
"""

import hashlib
import secrets
from datetime import timedelta, timezone

from ..extensions import db
from ..models import Account, SessionToken
from cadeau.time_utils import utcnow


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string (32 bytes of entropy).
    This is the plaintext token sent to client (never stored).
    """
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    Tokens are already high-entropy, so a fast hash is sufficient.
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_session(account_id: int, ttl_hours: int = 24) -> tuple[SessionToken, str]:
    """
    Create new session token for an account.

    Returns (session_record, plaintext_token).
    Client receives plaintext_token, database stores only the hash.
    """
    plaintext_token = generate_token()

    session = SessionToken(
        account_id=account_id,
        token_hash=hash_token(plaintext_token),
        expires_at=utcnow() + timedelta(hours=ttl_hours),
    )
    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def validate_session(token: str) -> Account | None:
    """Return the account behind a live token, or None."""
    if not token:
        return None

    session = db.session.query(SessionToken).filter_by(token_hash=hash_token(token)).first()
    if session is None or session.revoked_at is not None:
        return None

    expires_at = session.expires_at
    if expires_at.tzinfo is not None:
        expires_at = expires_at.astimezone(timezone.utc).replace(tzinfo=None)
    if expires_at <= utcnow():
        return None

    return session.account


def revoke_session(token: str) -> bool:
    """Revoke a session token. Returns False if the token is unknown or already revoked."""
    session = db.session.query(SessionToken).filter_by(token_hash=hash_token(token)).first()
    if session is None or session.revoked_at is not None:
        return False

    session.revoked_at = utcnow()
    db.session.commit()
    return True
