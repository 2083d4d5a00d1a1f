# backend/cadeau/routes/gifts.py
"""
Gift lifecycle API routes.

- Catalog listing and claim previews are public.
- Purchase, inventory, send, sent history and sync require a bearer token.
- Lifecycle errors come back as {"error", "message", "category"} with the
  status of the error class (see services/errors.py).
"""
from flask import Blueprint, current_app, g, jsonify, request

from ..extensions import db
from ..services import build_lifecycle, auth_service
from ..services.code_service import qr_data_url
from ..services.errors import GiftLifecycleError, AlreadyRedeemedError
from ..decorators import require_auth
from ..validation import ValidationError, parse_purchase_items, parse_send_request, optional_str
from cadeau.time_utils import utcnow, to_utc_z


gifts_bp = Blueprint("gifts", __name__, url_prefix="/api/gifts")

RECENT_SENT_LIMIT = 10


def _lifecycle():
    return build_lifecycle(db.session, current_app.config)


@gifts_bp.get("/types")
def list_gift_types():
    try:
        gift_types = _lifecycle().catalog.list_active()
        return jsonify({"gift_types": [gt.to_dict() for gt in gift_types]}), 200
    except Exception:
        current_app.logger.exception("Failed to fetch gift types")
        return jsonify({"error": "Internal server error"}), 500


@gifts_bp.post("/purchase")
@require_auth
def purchase_gifts():
    """
    Purchase gifts into the caller's inventory.

    Request body:
    {
        "items": [{"gift_type_id": int, "quantity": int}, ...]
    }

    Returns:
        201: Receipt
        400: Invalid request or invalid item
        503: Storage unavailable
    """
    payload = request.get_json(silent=True) or {}
    try:
        items = parse_purchase_items(payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        receipt = _lifecycle().purchases.purchase(g.current_account.id, items)
        return jsonify({"message": "Purchase successful", **receipt.to_dict()}), 201
    except GiftLifecycleError as e:
        return jsonify(e.to_dict()), e.status
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Purchase failed")
        return jsonify({"error": "Internal server error"}), 500


@gifts_bp.get("/inventory")
@require_auth
def get_inventory():
    try:
        lines = _lifecycle().ledger.query(g.current_account.id)
        return jsonify({"inventory": [line.to_dict() for line in lines]}), 200
    except Exception:
        current_app.logger.exception("Failed to fetch inventory")
        return jsonify({"error": "Internal server error"}), 500


@gifts_bp.post("/send")
@require_auth
def send_gift():
    """
    Send one unit of a gift.

    Request body:
    {
        "gift_type_id": int,
        "receiver_email": str (optional),
        "message": str (optional)
    }

    Returns:
        201: transaction id, gift summary, redemption code, QR and claim URL
        400: Invalid request
        409: Sender holds no unit of this gift
    """
    payload = request.get_json(silent=True) or {}
    try:
        data = parse_send_request(payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        result = _lifecycle().gifts.send(
            g.current_account.id,
            data["gift_type_id"],
            receiver_email=data["receiver_email"],
            message=data["message"],
        )
        return jsonify({"message": "Gift sent successfully", **result.to_dict()}), 201
    except GiftLifecycleError as e:
        return jsonify(e.to_dict()), e.status
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Send gift failed")
        return jsonify({"error": "Internal server error"}), 500


@gifts_bp.get("/sent")
@require_auth
def sent_gifts():
    try:
        history = _lifecycle().gifts.sent_history(g.current_account.id)
        return jsonify({"sent_gifts": history}), 200
    except Exception:
        current_app.logger.exception("Failed to fetch sent gifts")
        return jsonify({"error": "Internal server error"}), 500


@gifts_bp.get("/claim/<reference>")
def claim_gift(reference: str):
    """
    Public preview of a gift by transaction id or redemption code.

    Returns:
        200: Gift preview with QR of the redemption code
        404: Unknown reference
        410: Already redeemed
    """
    try:
        preview = _lifecycle().verifier.preview(reference)
        if preview.is_redeemed:
            gone = AlreadyRedeemedError()
            return jsonify(gone.to_dict()), gone.status

        gift = preview.to_dict()
        gift["qr_code"] = qr_data_url(preview.redemption_code)
        return jsonify({"gift": gift}), 200
    except GiftLifecycleError as e:
        return jsonify(e.to_dict()), e.status
    except Exception:
        current_app.logger.exception("Failed to load gift claim")
        return jsonify({"error": "Internal server error"}), 500


@gifts_bp.post("/sync")
@require_auth
def sync_device():
    """
    Keyboard-extension sync: records the device and returns inventory plus recent sends.

    Request body:
    {
        "device_id": str (optional)
    }
    """
    payload = request.get_json(silent=True) or {}
    try:
        device_id = optional_str(payload, "device_id", 128)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        auth_service.record_device(g.current_account, device_id)

        lifecycle = _lifecycle()
        inventory = lifecycle.ledger.query(g.current_account.id)
        recent = lifecycle.gifts.sent_history(g.current_account.id, limit=RECENT_SENT_LIMIT)

        return jsonify({
            "inventory": [line.to_dict() for line in inventory],
            "recent_sent": recent,
            "sync_time": to_utc_z(utcnow()),
        }), 200
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Sync failed")
        return jsonify({"error": "Internal server error"}), 500
