# backend/cadeau/routes/auth.py
"""
Account registration and session routes.
"""
from flask import Blueprint, current_app, g, jsonify, request

from ..extensions import db
from ..services import auth_service, session_service
from ..services.auth_service import PasswordValidationError
from ..decorators import require_auth
from ..validation import ValidationError, ConflictError, required_str, validate_email


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_response(account, message: str, status: int = 200):
    session, token = session_service.create_session(
        account.id, ttl_hours=current_app.config["SESSION_TTL_HOURS"]
    )
    return jsonify({
        "message": message,
        "account": account.to_dict(),
        "token": token,
        "session": session.to_dict(),
    }), status


@auth_bp.post("/register")
def register_route():
    """
    Register a new account and log it in.

    Request body:
    {
        "email": str,
        "name": str,
        "password": str
    }
    """
    payload = request.get_json(silent=True) or {}
    try:
        email = validate_email(required_str(payload, "email"))
        name = required_str(payload, "name", 120)
        password = payload.get("password")
        if not isinstance(password, str) or not password:
            raise ValidationError("password is required")
        account = auth_service.create_account(
            email, name, password, rounds=current_app.config["BCRYPT_ROUNDS"]
        )
    except (ValidationError, PasswordValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    try:
        return _session_response(account, "Registration successful", 201)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create session after registration")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    payload = request.get_json(silent=True) or {}
    email = payload.get("email")
    password = payload.get("password")
    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        return jsonify({"error": "Email and password are required"}), 400

    try:
        account = auth_service.authenticate(email, password)
        if account is None:
            return jsonify({"error": "Invalid credentials"}), 401
        return _session_response(account, "Login successful")
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to login")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/demo-login")
def demo_login_route():
    """Log in as the demo account, creating it on first use."""
    try:
        account = auth_service.ensure_demo_account(
            current_app.config["DEMO_ACCOUNT_EMAIL"],
            current_app.config["DEMO_ACCOUNT_PASSWORD"],
            rounds=current_app.config["BCRYPT_ROUNDS"],
        )
        return _session_response(account, "Demo login successful")
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed demo login")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_auth
def logout_route():
    session_service.revoke_session(g.token)
    return jsonify({"message": "Logout successful"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"account": g.current_account.to_dict()}), 200
