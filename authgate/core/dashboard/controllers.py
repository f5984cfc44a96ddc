"""Protected dashboard pages."""

from __future__ import annotations

from flask import Blueprint, jsonify, session

from authgate.core.utils.decorators import SESSION_USER_KEY, session_required

dashboard_pages_bp = Blueprint("dashboard_pages", __name__)


@dashboard_pages_bp.get("/dashboard")
@session_required
def dashboard():
    return jsonify({"ok": True, "user": session[SESSION_USER_KEY]})
