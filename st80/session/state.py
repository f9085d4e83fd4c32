"""Session lifecycle state machine"""

from __future__ import annotations

import logging
import threading
from enum import Enum

from st80.common.errors import SessionStateError

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle phases of one session"""
    IDLE = "idle"
    RESOLVING = "resolving"
    NEGOTIATING = "negotiating"
    CONFIGURING = "configuring"
    RUNNING = "running"
    TERMINATING = "terminating"
    STOPPED = "stopped"


# Startup phases may abort straight to STOPPED; a running session always
# passes through TERMINATING.
_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.IDLE: frozenset({SessionState.RESOLVING, SessionState.STOPPED}),
    SessionState.RESOLVING: frozenset({SessionState.NEGOTIATING, SessionState.STOPPED}),
    SessionState.NEGOTIATING: frozenset({SessionState.CONFIGURING, SessionState.STOPPED}),
    SessionState.CONFIGURING: frozenset({SessionState.RUNNING, SessionState.STOPPED}),
    SessionState.RUNNING: frozenset({SessionState.TERMINATING}),
    SessionState.TERMINATING: frozenset({SessionState.STOPPED}),
    SessionState.STOPPED: frozenset(),
}


class SessionStateMachine:
    """
    Tracks the lifecycle phase of a session.

    Transitions can come from the engine thread and from the close-request
    worker, so each check-and-set is done under a short internal lock. The
    lock is never held while calling out.
    """

    def __init__(self) -> None:
        self._lock: threading.Lock = threading.Lock()
        self._state: SessionState = SessionState.IDLE

    @property
    def state(self) -> SessionState:
        return self._state

    def transition(self, target: SessionState) -> None:
        """
        Move to `target`.

        Args:
            target: Next state.

        Raises:
            SessionStateError: If the transition is not allowed.
        """
        with self._lock:
            source: SessionState = self._state
            if target not in _TRANSITIONS[source]:
                raise SessionStateError(f"Illegal session transition {source.value} -> {target.value}")
            self._state = target
        logger.debug("[STATE] %s -> %s", source.value, target.value)
