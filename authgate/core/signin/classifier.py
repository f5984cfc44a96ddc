"""Classification of identity-provider failures into a closed set of kinds."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class FailureKind(str, Enum):
    INVALID_EMAIL = "invalid_email"
    ACCOUNT_DISABLED = "account_disabled"
    ACCOUNT_NOT_FOUND = "account_not_found"
    WRONG_CREDENTIAL = "wrong_credential"
    UNKNOWN = "unknown"


PROVIDER_ERROR_CODES = {
    "auth/invalid-email": FailureKind.INVALID_EMAIL,
    "auth/user-disabled": FailureKind.ACCOUNT_DISABLED,
    "auth/user-not-found": FailureKind.ACCOUNT_NOT_FOUND,
    "auth/wrong-password": FailureKind.WRONG_CREDENTIAL,
}


def classify(code: Any) -> FailureKind:
    """Map a provider error code to a FailureKind; unrecognised input is UNKNOWN."""
    if not isinstance(code, str):
        return FailureKind.UNKNOWN
    return PROVIDER_ERROR_CODES.get(code, FailureKind.UNKNOWN)


def provider_error_code(exc: BaseException) -> Optional[str]:
    """Return the provider `code` carried by an exception, if it has one."""
    code = getattr(exc, "code", None)
    return code if isinstance(code, str) else None


__all__ = [
    "FailureKind",
    "PROVIDER_ERROR_CODES",
    "classify",
    "provider_error_code",
]
