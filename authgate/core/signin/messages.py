"""User-facing copy for sign-in failures, keyed by FailureKind."""

from __future__ import annotations

from typing import Dict

from authgate.core.signin.classifier import FailureKind

FAILURE_TITLE = "Error!"

FAILURE_MESSAGES: Dict[FailureKind, str] = {
    FailureKind.INVALID_EMAIL: "This email is not valid.",
    FailureKind.ACCOUNT_DISABLED: "This user has been disabled.",
    FailureKind.ACCOUNT_NOT_FOUND: "This user was not found.",
    FailureKind.WRONG_CREDENTIAL: "Invalid or missing password.",
    FailureKind.UNKNOWN: "The operation could not be completed.",
}


def failure_message(kind: FailureKind) -> Dict[str, str]:
    return {"title": FAILURE_TITLE, "message": FAILURE_MESSAGES[kind]}
