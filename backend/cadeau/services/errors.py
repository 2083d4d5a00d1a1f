# Overview: Error taxonomy for the gift lifecycle (purchase, send, redeem, preview).

from __future__ import annotations

from http import HTTPStatus


class GiftLifecycleError(Exception):
    """
    Base for recoverable lifecycle failures.

    Each subclass maps to a distinct HTTP status and a category the caller
    can act on: bad_request (fix the input), dead_code (the code will never
    work) or retry (transient storage trouble).
    """
    code = "lifecycle_error"
    status = HTTPStatus.BAD_REQUEST
    category = "bad_request"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category,
        }


class InvalidItemError(GiftLifecycleError):
    """Unknown or inactive gift type, or a non-positive quantity."""
    code = "invalid_item"
    status = HTTPStatus.BAD_REQUEST


class InsufficientBalanceError(GiftLifecycleError):
    """Debit exceeds the account's holdings."""
    code = "insufficient_balance"
    status = HTTPStatus.CONFLICT


class GiftNotFoundError(GiftLifecycleError):
    code = "not_found"
    status = HTTPStatus.NOT_FOUND
    category = "dead_code"

    def __init__(self, message: str | None = None):
        super().__init__(message or "Gift not found")


class AlreadyRedeemedError(GiftLifecycleError):
    code = "already_redeemed"
    status = HTTPStatus.GONE
    category = "dead_code"

    def __init__(self, message: str | None = None):
        super().__init__(message or "Gift already redeemed")


class StorageError(GiftLifecycleError):
    """Persistence unavailable; the core does not retry beyond run_with_retry."""
    code = "storage_failure"
    status = HTTPStatus.SERVICE_UNAVAILABLE
    category = "retry"
