# Overview: Service-layer operations for accounts; credential hashing and lookup.

"""
Account authentication.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters, at least one letter and one digit
- Email is the login identifier and is stored lower-cased
- Session tokens managed separately (see session_service.py)
"""

import logging
import re

import bcrypt
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Account
from ..validation import ConflictError
from cadeau.time_utils import utcnow

logger = logging.getLogger(__name__)


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Raises PasswordValidationError if requirements not met.
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Za-z]', password):
        raise PasswordValidationError("Password must contain at least one letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """Returns True if password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash in the database
        return False


def get_account_by_email(email: str) -> Account | None:
    return db.session.query(Account).filter_by(email=email.strip().lower()).first()


def create_account(email: str, name: str, password: str, *, rounds: int = 12) -> Account:
    """
    Create an account with a bcrypt password hash.

    Raises PasswordValidationError for weak passwords and ConflictError
    when the email is taken.
    """
    email = email.strip().lower()
    if get_account_by_email(email):
        raise ConflictError("Email already registered")

    account = Account(email=email, name=name.strip(), password_hash=hash_password(password, rounds))
    db.session.add(account)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Email already registered")

    logger.info("account %s registered", account.id)
    return account


def authenticate(email: str, password: str) -> Account | None:
    """
    Check credentials and stamp last_login_at.

    Returns None for unknown email or wrong password alike.
    """
    account = get_account_by_email(email)
    if account is None or not verify_password(password, account.password_hash):
        return None

    account.last_login_at = utcnow()
    db.session.commit()
    return account


def ensure_demo_account(email: str, password: str, name: str = "Demo User", *, rounds: int = 12) -> Account:
    """Idempotently create the demo account."""
    account = get_account_by_email(email)
    if account:
        return account
    return create_account(email, name, password, rounds=rounds)


def record_device(account: Account, device_id: str | None) -> None:
    if device_id and account.device_id != device_id:
        account.device_id = device_id
        db.session.commit()
