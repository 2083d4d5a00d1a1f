# backend/cadeau/routes/partners.py
"""
Partner-facing API routes.

SECURITY: All routes require an active partner API key (X-Partner-Key).
"""
from flask import Blueprint, current_app, g, jsonify, request

from ..extensions import db
from ..services import build_lifecycle, partner_service
from ..services.errors import GiftLifecycleError
from ..decorators import require_partner
from ..validation import ValidationError, required_str


partners_bp = Blueprint("partners", __name__, url_prefix="/api/partners")


@partners_bp.post("/redeem")
@require_partner
def redeem_code():
    """
    Redeem a gift code for the calling partner.

    Request body:
    {
        "code": str  (redemption code or transaction id)
    }

    Returns:
        200: Redeemed transaction
        400: Invalid request
        404: Unknown code
        410: Already redeemed
    """
    payload = request.get_json(silent=True) or {}
    try:
        code = required_str(payload, "code", 64)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        lifecycle = build_lifecycle(db.session, current_app.config)
        tx = lifecycle.gifts.redeem(code, partner_id=g.current_partner.id)
        gift_type = lifecycle.catalog.get(tx.gift_type_id)
        return jsonify({
            "message": "Gift redeemed",
            "transaction": tx.to_dict(),
            "gift": gift_type.to_dict() if gift_type else None,
        }), 200
    except GiftLifecycleError as e:
        return jsonify(e.to_dict()), e.status
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Redemption failed")
        return jsonify({"error": "Internal server error"}), 500


@partners_bp.get("/stats")
@require_partner
def partner_stats():
    try:
        stats = partner_service.get_partner_stats(g.current_partner.id)
        return jsonify({"partner": g.current_partner.to_dict(), "stats": stats}), 200
    except Exception:
        current_app.logger.exception("Failed to load partner stats")
        return jsonify({"error": "Internal server error"}), 500
