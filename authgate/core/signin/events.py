"""Sign-in event catalog."""

from __future__ import annotations

SIGNIN_VALIDATION_FAILED = "signin.validation_failed"
SIGNIN_FAILED = "signin.failed"
SIGNIN_SUCCEEDED = "signin.succeeded"

EVENT_CATALOG = {
    SIGNIN_VALIDATION_FAILED: {
        "version": "v1",
        "payload": {"errors": "dict[str, str]"},
    },
    SIGNIN_FAILED: {
        "version": "v1",
        "payload": {"kind": "FailureKind"},
    },
    SIGNIN_SUCCEEDED: {
        "version": "v1",
        "payload": {"route": "str"},
    },
}

__all__ = [
    "SIGNIN_VALIDATION_FAILED",
    "SIGNIN_FAILED",
    "SIGNIN_SUCCEEDED",
    "EVENT_CATALOG",
]
