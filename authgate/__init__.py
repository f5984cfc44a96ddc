"""AuthGate application factory and bootstrap."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from flask import Flask, redirect, url_for

from authgate.config import config_by_name
from authgate.core.signin.identity_provider import FirebasePasswordSignIn
from authgate.extensions import init_extensions


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the AuthGate Flask application."""
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()

    app = Flask(
        __name__,
        template_folder=str(Path(__file__).parent / "templates"),
    )
    config_cls = config_by_name.get(env_name, config_by_name["development"])
    app.config.from_object(config_cls)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    init_extensions(app)
    _register_blueprints(app)
    _register_error_handlers(app)

    # Injected capability; tests swap in a fake credential check here.
    app.extensions["credential_check"] = FirebasePasswordSignIn(
        api_key=app.config["FIREBASE_API_KEY"],
        timeout=app.config["IDENTITY_PROVIDER_TIMEOUT_SECONDS"],
    )
    if not app.config["FIREBASE_API_KEY"]:
        app.logger.warning("FIREBASE_API_KEY is not set; every sign-in attempt will fail")

    @app.get("/")
    def index():
        return redirect(url_for(app.config["PROTECTED_ROUTE"]))

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    return app


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from authgate.core.dashboard.controllers import dashboard_pages_bp
    from authgate.core.signin.controllers import auth_bp, auth_pages_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(auth_pages_bp, url_prefix="/auth")
    app.register_blueprint(dashboard_pages_bp)


def _register_error_handlers(app: Flask) -> None:
    """Basic JSON error responses."""
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return {"ok": False, "error": exc.description}, exc.code

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        # In debug/testing, surface the exception message to speed up diagnosis
        if app.debug or app.testing:
            return {"ok": False, "error": str(exc)}, 500
        return {"ok": False, "error": "unexpected_error"}, 500
