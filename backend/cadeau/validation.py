from __future__ import annotations

import re
from typing import Any

from .services.purchase_service import PurchaseItem


# Same bound the purchase and send endpoints accept for ids and quantities
MAX_INT = 2_147_483_647

MAX_MESSAGE_LENGTH = 500

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate email)."""


def coerce_int(value: Any, field: str) -> int:
    """
    Strict integer coercion for JSON input.

    Accepts ints and plain-digit strings. Rejects bools, floats, decimals
    and scientific notation.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not re.fullmatch(r"-?\d+", stripped):
            raise ValidationError(f"{field} must be a plain integer")
        result = int(stripped)
    else:
        raise ValidationError(f"{field} must be an integer")

    if abs(result) > MAX_INT:
        raise ValidationError(f"{field} is out of range")
    return result


def optional_str(payload: dict, field: str, max_length: int = 255) -> str | None:
    value = payload.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    value = value.strip()
    if not value:
        return None
    if len(value) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return value


def required_str(payload: dict, field: str, max_length: int = 255) -> str:
    value = optional_str(payload, field, max_length)
    if value is None:
        raise ValidationError(f"{field} is required")
    return value


def validate_email(value: str | None, field: str = "email") -> str | None:
    if value is None:
        return None
    if not _EMAIL_RE.match(value):
        raise ValidationError(f"{field} must be a valid email address")
    return value.lower()


def parse_purchase_items(payload: dict) -> list[PurchaseItem]:
    """
    Shape-check a purchase body: {"items": [{"gift_type_id": int, "quantity": int}, ...]}.

    Quantity sign and catalog membership are the purchase processor's job;
    this only rejects payloads that are not a list of integer pairs.
    """
    items = payload.get("items")
    if not isinstance(items, list) or not items:
        raise ValidationError("Items are required")

    parsed = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f"items[{index}] must be an object")
        if "gift_type_id" not in item or "quantity" not in item:
            raise ValidationError(f"items[{index}] requires gift_type_id and quantity")
        parsed.append(
            PurchaseItem(
                gift_type_id=coerce_int(item["gift_type_id"], f"items[{index}].gift_type_id"),
                quantity=coerce_int(item["quantity"], f"items[{index}].quantity"),
            )
        )
    return parsed


def parse_send_request(payload: dict) -> dict:
    if payload.get("gift_type_id") is None:
        raise ValidationError("gift_type_id is required")
    return {
        "gift_type_id": coerce_int(payload["gift_type_id"], "gift_type_id"),
        "receiver_email": validate_email(optional_str(payload, "receiver_email"), "receiver_email"),
        "message": optional_str(payload, "message", MAX_MESSAGE_LENGTH),
    }
