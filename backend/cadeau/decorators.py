# Overview: Request authentication decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import session_service, partner_service
from .services.partner_service import PARTNER_STATUS_ACTIVE


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require a bearer session token.

    Sets g.current_account and g.token. Returns 401 when the header is
    missing or the token is unknown, revoked or expired.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        account = session_service.validate_session(token)
        if account is None:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_account = account
        g.token = token
        return f(*args, **kwargs)

    return decorated_function


def require_partner(f):
    """
    Require an active partner API key in X-Partner-Key.

    Sets g.current_partner. 401 for a missing or unknown key, 403 while the
    partner is still pending.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        partner = partner_service.authenticate_partner(request.headers.get("X-Partner-Key"))
        if partner is None:
            return jsonify({"error": "Partner authentication required"}), 401
        if partner.status != PARTNER_STATUS_ACTIVE:
            return jsonify({"error": "Partner account is not active"}), 403

        g.current_partner = partner
        return f(*args, **kwargs)

    return decorated_function
