"""Schemas for the email/password sign-in form."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

# local@domain.tld with no whitespace anywhere
_EMAIL_REGEX = re.compile(r"[^\s@]+@[^\s@.]+(\.[^\s@.]+)+")

PASSWORD_MIN_LENGTH = 6

EMAIL_ERROR = "invalid format"
PASSWORD_ERROR = f"too short (min {PASSWORD_MIN_LENGTH})"

FIELD_MESSAGES = {
    "email": EMAIL_ERROR,
    "password": PASSWORD_ERROR,
}

FieldErrors = Dict[str, str]


class Credentials(BaseModel):
    """An email/password pair that passed validation; immutable per attempt."""

    model_config = ConfigDict(frozen=True, strict=True)

    email: str
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not _EMAIL_REGEX.fullmatch(v):
            raise ValueError(EMAIL_ERROR)
        return v


@dataclass(frozen=True)
class ValidationResult:
    credentials: Optional[Credentials] = None
    errors: FieldErrors = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.credentials is not None


def _field_errors(exc: ValidationError) -> FieldErrors:
    errors: FieldErrors = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        name = loc[0] if loc else None
        if name in FIELD_MESSAGES:
            errors.setdefault(name, FIELD_MESSAGES[name])
    return errors


def validate_credentials(raw: Mapping[str, Any]) -> ValidationResult:
    """Validate raw form input, reporting every failing field at once."""
    payload = {name: raw.get(name) for name in FIELD_MESSAGES} if raw else {}
    try:
        credentials = Credentials.model_validate(payload)
    except ValidationError as exc:
        return ValidationResult(errors=_field_errors(exc))
    return ValidationResult(credentials=credentials)


def field_errors(raw: Mapping[str, Any]) -> FieldErrors:
    return validate_credentials(raw).errors
