# backend/cadeau/routes/system.py
"""
System health and demo endpoints.
"""

import time
from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from ..extensions import db
from cadeau.time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "healthy", "latency_ms": round(elapsed_ms, 2)}
    except Exception:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/health")
def health():
    database = check_database_health()
    healthy = database["status"] == "healthy"
    return jsonify({
        "status": "OK" if healthy else "DEGRADED",
        "timestamp": to_utc_z(utcnow()),
        "version": current_app.config["API_VERSION"],
        "checks": {"database": database},
    }), 200 if healthy else 503


@system_bp.get("/api/demo/status")
def demo_status():
    return jsonify({
        "message": "Cadeau API Demo",
        "endpoints": {
            "auth": {
                "POST /api/auth/demo-login": "Quick demo login",
                "POST /api/auth/register": "Register new account",
                "POST /api/auth/login": "Account login",
                "POST /api/auth/logout": "Revoke the current token (requires auth)",
            },
            "gifts": {
                "GET /api/gifts/types": "Get all gift types",
                "POST /api/gifts/purchase": "Purchase gifts (requires auth)",
                "GET /api/gifts/inventory": "Get inventory (requires auth)",
                "POST /api/gifts/send": "Send a gift (requires auth)",
                "GET /api/gifts/sent": "Get sent gifts history (requires auth)",
                "GET /api/gifts/claim/<id-or-code>": "Preview a gift (public)",
                "POST /api/gifts/sync": "Sync for the iOS keyboard (requires auth)",
            },
            "partners": {
                "POST /api/partners/redeem": "Redeem a gift code (requires X-Partner-Key)",
                "GET /api/partners/stats": "Partner statistics (requires X-Partner-Key)",
            },
        },
        "demo": {
            "account": current_app.config["DEMO_ACCOUNT_EMAIL"],
        },
    }), 200


@system_bp.get("/api/demo/sample-purchase")
def demo_sample_purchase():
    return jsonify({
        "message": "Sample purchase data",
        "sample_request": {
            "method": "POST",
            "url": "/api/gifts/purchase",
            "headers": {
                "Authorization": "Bearer YOUR_TOKEN",
                "Content-Type": "application/json",
            },
            "body": {
                "items": [
                    {"gift_type_id": 1, "quantity": 3},
                    {"gift_type_id": 2, "quantity": 2},
                ]
            },
        },
    }), 200
