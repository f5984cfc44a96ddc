"""Access decision for protected routes."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, FrozenSet, Iterable, Optional

logger = logging.getLogger(__name__)


class GateDecision(str, Enum):
    ALLOWED = "allowed"
    DENIED = "denied"

    @property
    def allowed(self) -> bool:
        return self is GateDecision.ALLOWED


class SessionGate:
    """Allow a protected route only while the identity provider reports a session.

    The gate only decides. Callers redirect to the sign-in entry point on
    DENIED; a denial is not transient and should not be retried.
    """

    def __init__(
        self,
        has_active_session: Callable[[], bool],
        protected_routes: Optional[Iterable[str]] = None,
    ) -> None:
        self._has_active_session = has_active_session
        self._protected_routes: Optional[FrozenSet[str]] = (
            frozenset(protected_routes) if protected_routes is not None else None
        )

    def is_protected(self, route_id: str) -> bool:
        return self._protected_routes is None or route_id in self._protected_routes

    def can_enter(self, route_id: str) -> GateDecision:
        if not self.is_protected(route_id):
            return GateDecision.ALLOWED
        decision = GateDecision.ALLOWED if self._has_active_session() else GateDecision.DENIED
        logger.debug("Session gate %s for route %s", decision.value, route_id)
        return decision
