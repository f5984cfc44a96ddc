"""Reusable decorators for controllers."""

from __future__ import annotations

from functools import wraps
from typing import Callable, TypeVar

from flask import jsonify, redirect, request, session, url_for

from authgate.core.signin.session_gate import SessionGate

F = TypeVar("F", bound=Callable)

SESSION_USER_KEY = "user"


def has_active_session() -> bool:
    return bool(session.get(SESSION_USER_KEY))


session_gate = SessionGate(has_active_session)


def session_required(fn: F) -> F:
    """Redirect to the sign-in page unless a session is present."""

    @wraps(fn)
    def wrapper(*args, **kwargs):  # type: ignore[misc]
        if session_gate.can_enter(request.endpoint or "").allowed:
            return fn(*args, **kwargs)
        return redirect(url_for("auth_pages.login_page", next=request.path))

    return wrapper  # type: ignore[return-value]


def api_session_required(fn: F) -> F:
    """JSON variant of `session_required` for API endpoints."""

    @wraps(fn)
    def wrapper(*args, **kwargs):  # type: ignore[misc]
        if session_gate.can_enter(request.endpoint or "").allowed:
            return fn(*args, **kwargs)
        return jsonify({"ok": False, "error": "unauthorized"}), 401

    return wrapper  # type: ignore[return-value]
