"""Email/password sign-in state machine.

One controller instance backs one sign-in form. Each call to ``submit`` is an
attempt: the raw input is validated, the injected credential check is awaited
once, and the outcome is published on the controller's event bus. The
``on_*`` callbacks given at construction are subscribed to that bus, so the
presentation layer (field errors, toasts, navigation) only ever receives data.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Optional

from authgate.core.events.event_bus import Event, EventBus, EventHandler
from authgate.core.signin.classifier import FailureKind, classify, provider_error_code
from authgate.core.signin.events import (
    SIGNIN_FAILED,
    SIGNIN_SUCCEEDED,
    SIGNIN_VALIDATION_FAILED,
)
from authgate.core.signin.schemas import FieldErrors, validate_credentials

logger = logging.getLogger(__name__)

CredentialCheck = Callable[[str, str], Awaitable[Any]]


class SubmissionStatus(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionState:
    status: SubmissionStatus = SubmissionStatus.IDLE
    failure: Optional[FailureKind] = None

    @property
    def in_flight(self) -> bool:
        return self.status is SubmissionStatus.SUBMITTING


IDLE = SubmissionState()


class SignInController:
    def __init__(
        self,
        credential_check: CredentialCheck,
        *,
        protected_route: str,
        on_validation_error: Optional[Callable[[FieldErrors], None]] = None,
        on_failure: Optional[Callable[[FailureKind], None]] = None,
        on_success: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._credential_check = credential_check
        self._protected_route = protected_route
        self._state = IDLE
        self._disposed = False
        self._bus = EventBus()

        if on_validation_error is not None:
            self.subscribe(SIGNIN_VALIDATION_FAILED, lambda e: on_validation_error(e.payload["errors"]))
        if on_failure is not None:
            self.subscribe(SIGNIN_FAILED, lambda e: on_failure(e.payload["kind"]))
        if on_success is not None:
            self.subscribe(SIGNIN_SUCCEEDED, lambda e: on_success(e.payload["route"]))

    @property
    def state(self) -> SubmissionState:
        return self._state

    @property
    def disposed(self) -> bool:
        return self._disposed

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._bus.subscribe(event_type, handler)

    def field_errors(self, raw: Mapping[str, Any]) -> FieldErrors:
        """Validate without side effects (per-keystroke feedback)."""
        return validate_credentials(raw).errors

    def can_submit(self, raw: Mapping[str, Any]) -> bool:
        if self._disposed or self._state.in_flight:
            return False
        return validate_credentials(raw).ok

    def dispose(self) -> None:
        """Detach the controller; late results of an outstanding check are dropped."""
        if self._disposed:
            return
        self._disposed = True
        self._bus.clear()
        logger.debug("Sign-in controller disposed in state %s", self._state.status.value)

    async def submit(self, raw: Mapping[str, Any]) -> SubmissionState:
        """Run one sign-in attempt and return the state it ended in."""
        if self._disposed:
            return self._state
        if self._state.in_flight:
            logger.debug("Ignoring submit while a sign-in attempt is in flight")
            return self._state

        self._transition(SubmissionState(SubmissionStatus.VALIDATING))
        result = validate_credentials(raw)
        if not result.ok:
            self._transition(IDLE)
            self._emit(SIGNIN_VALIDATION_FAILED, errors=dict(result.errors))
            return self._state

        credentials = result.credentials
        self._transition(SubmissionState(SubmissionStatus.SUBMITTING))
        try:
            await self._credential_check(credentials.email, credentials.password)
        except asyncio.CancelledError:
            # The caller abandoned the attempt; leave the form usable again.
            if not self._disposed:
                self._transition(IDLE)
            raise
        except Exception as exc:
            if self._disposed:
                logger.debug("Dropping sign-in rejection received after disposal")
                return self._state
            code = provider_error_code(exc)
            kind = classify(code)
            logger.info("Sign-in rejected by identity provider (code=%s, kind=%s)", code, kind.value)
            self._transition(SubmissionState(SubmissionStatus.FAILED, kind))
            self._emit(SIGNIN_FAILED, kind=kind)
            return self._state

        if self._disposed:
            logger.debug("Dropping sign-in success received after disposal")
            return self._state
        self._transition(SubmissionState(SubmissionStatus.SUCCEEDED))
        self._emit(SIGNIN_SUCCEEDED, route=self._protected_route)
        return self._state

    # --- helpers ---

    def _transition(self, state: SubmissionState) -> None:
        logger.debug("Sign-in state %s -> %s", self._state.status.value, state.status.value)
        self._state = state

    def _emit(self, event_type: str, **payload: Any) -> None:
        self._bus.publish(Event(event_type=event_type, payload=payload))
