"""Sign-in HTTP controllers (API + login page)."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlsplit

from flask import Blueprint, current_app, jsonify, redirect, render_template, request, session, url_for

from authgate.core.signin.messages import failure_message
from authgate.core.signin.sign_in_controller import (
    CredentialCheck,
    SignInController,
    SubmissionStatus,
)
from authgate.core.utils.decorators import SESSION_USER_KEY, api_session_required
from authgate.extensions import limiter

auth_bp = Blueprint("auth_api", __name__)
auth_pages_bp = Blueprint("auth_pages", __name__)


def _submitted_form() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict()


async def _attempt_sign_in(
    credential_check: CredentialCheck, protected_route: str, raw: Mapping[str, Any]
) -> Dict[str, Any]:
    outcome: Dict[str, Any] = {}
    controller = SignInController(
        credential_check,
        protected_route=protected_route,
        on_validation_error=lambda errors: outcome.update(errors=errors),
        on_failure=lambda kind: outcome.update(failure=kind),
        on_success=lambda route: outcome.update(route=route),
    )
    try:
        state = await controller.submit(raw)
    finally:
        controller.dispose()
    outcome["status"] = state.status
    return outcome


def safe_next_url(value: Any) -> Optional[str]:
    """Return `value` only if it is a path on this site (no scheme or host)."""
    if not isinstance(value, str) or not value.startswith("/") or value.startswith("//"):
        return None
    if "\\" in value or any(ch.isspace() for ch in value):
        return None
    parts = urlsplit(value)
    if parts.scheme or parts.netloc:
        return None
    return value


def _render_login(status: int = 200, **context: Any):
    context.setdefault("field_errors", {})
    return render_template("auth/login.html", **context), status


@auth_bp.post("/login")
@limiter.limit("10/minute")
def login():
    raw = _submitted_form()
    wants_json = request.is_json
    next_url = safe_next_url(raw.get("next"))
    outcome = asyncio.run(
        _attempt_sign_in(
            current_app.extensions["credential_check"],
            current_app.config["PROTECTED_ROUTE"],
            raw,
        )
    )

    if "errors" in outcome:
        if wants_json:
            return jsonify({"ok": False, "error": "bad_request", "details": outcome["errors"]}), 400
        return _render_login(400, field_errors=outcome["errors"], email=raw.get("email"), next_url=next_url)

    # The provider was consulted; a new attempt never inherits the previous session.
    session.pop(SESSION_USER_KEY, None)
    if "failure" in outcome:
        kind = outcome["failure"]
        if wants_json:
            return jsonify({"ok": False, "error": kind.value, **failure_message(kind)}), 401
        return _render_login(401, failure=failure_message(kind), email=raw.get("email"), next_url=next_url)
    if outcome["status"] is not SubmissionStatus.SUCCEEDED:
        return jsonify({"ok": False, "error": "unexpected_error"}), 500

    session[SESSION_USER_KEY] = {"email": raw["email"]}
    target = next_url or url_for(outcome["route"])
    if wants_json:
        return jsonify({"ok": True, "redirect": target})
    return redirect(target)


@auth_bp.post("/logout")
def logout():
    session.pop(SESSION_USER_KEY, None)
    return jsonify({"ok": True})


@auth_bp.get("/me")
@api_session_required
def me():
    return jsonify({"ok": True, "user": session[SESSION_USER_KEY]})


@auth_pages_bp.get("/login")
def login_page():
    return _render_login(next_url=safe_next_url(request.args.get("next")))
