# backend/cadeau/__init__.py
import os

from flask import Flask

from .config import Config
from .extensions import db, migrate

MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "migrations")


def create_app(config_object=None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object or Config)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions; the session is released at app-context teardown
    db.init_app(app)
    migrate.init_app(app, db, directory=MIGRATIONS_DIR)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.gifts import gifts_bp
    from .routes.partners import partners_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(gifts_bp)
    app.register_blueprint(partners_bp)

    @app.errorhandler(404)
    def not_found(error):
        return {
            "error": "Not found",
            "message": "Route not found",
            "available_routes": "/api/demo/status",
        }, 404

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
