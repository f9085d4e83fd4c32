"""
Session shutdown policy.

This module owns what happens when a session ends: which termination event
wins, whether disk changes are flushed, what is reported, and which exit code
the process gets. The first terminal event claims the coordinator; every
later event is ignored. The claim is a non-blocking try-acquire so neither
the engine thread nor the close-request worker can block on the other.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
import traceback
from typing import Callable, TextIO

from st80.common.types import (
    CloseChoice,
    EngineFault,
    EngineQuit,
    ExitCode,
    ShutdownOutcome,
    TerminationEvent,
    UserCloseRequest,
    UserCloseResolved,
    terminationReason_describe,
)
from st80.session.state import SessionState, SessionStateMachine
from st80.store.backend import BackingStoreHandle
from st80.vm.backend import Engine, StopSignal

__all__ = [
    "ShutdownCoordinator",
    "flushRequired_check",
]

logger = logging.getLogger(__name__)

ProcessExit = Callable[[int], None]


def flushRequired_check(event: TerminationEvent) -> bool:
    """
    Decide whether a terminal event flushes disk changes.

    Args:
        event: Terminal event.

    Returns:
        False only for "quit without saving".
    """
    if isinstance(event, UserCloseResolved):
        return event.choice == CloseChoice.SAVE_AND_QUIT
    return isinstance(event, (EngineQuit, EngineFault))


class ShutdownCoordinator:
    """Single-fire handler for the end of a session."""

    def __init__(
        self,
        handle: BackingStoreHandle,
        engine: Engine,
        stats_at_end: bool,
        stop_grace_seconds: float = 5.0,
        stop_signal: StopSignal | None = None,
        session_state: SessionStateMachine | None = None,
        process_exit: ProcessExit = os._exit,
        output: TextIO | None = None,
    ) -> None:
        """
        Initialize shutdown coordinator.

        Args:
            handle:
                Backing store of the session.
            engine:
                Engine to stop and to ask for statistics.
            stats_at_end:
                Print interpreter statistics on exit.
            stop_grace_seconds:
                How long a user close waits for the engine to stop.
            stop_signal:
                Stop flag shared with the engine; a private one when None.
            session_state:
                Lifecycle state moved to TERMINATING on claim.
            process_exit:
                Used when a user close finished but the engine keeps running.
            output:
                Stream for exit diagnostics; stdout when None.
        """
        self._handle: BackingStoreHandle = handle
        self._engine: Engine = engine
        self._stats_at_end: bool = stats_at_end
        self._stop_grace_seconds: float = stop_grace_seconds
        self._stop_signal: StopSignal = stop_signal if stop_signal is not None else StopSignal()
        self._session_state: SessionStateMachine | None = session_state
        self._process_exit: ProcessExit = process_exit
        self._output: TextIO | None = output

        self._claim: threading.Lock = threading.Lock()
        self._completed: threading.Event = threading.Event()
        self._engine_idle: threading.Event = threading.Event()
        self._outcome: ShutdownOutcome | None = None

    @property
    def outcome(self) -> ShutdownOutcome | None:
        """Outcome of the handled event, None until completed"""
        return self._outcome

    def engineIdle_mark(self) -> None:
        """Record that the engine's run entry point has returned."""
        self._engine_idle.set()

    def completion_wait(self, timeout: float | None = None) -> bool:
        """
        Wait until the claimed event has been fully handled.

        Returns:
            True when handling completed.
        """
        return self._completed.wait(timeout)

    def terminationEvent_handle(self, event: TerminationEvent) -> ShutdownOutcome | None:
        """
        Act on a termination event if it is the first terminal one.

        Args:
            event: Event from the engine or the close-request worker.

        Returns:
            Outcome when this call handled the event, None if the event was
            not terminal or the session was already claimed.
        """
        if isinstance(event, UserCloseRequest):
            logger.warning("Unresolved close request ignored; it must be resolved first")
            return None
        if isinstance(event, UserCloseResolved) and not event.isTerminal():
            logger.info("Close cancelled, session continues")
            return None
        if not self._claim.acquire(blocking=False):
            if isinstance(event, EngineFault):
                logger.error(
                    "Engine fault after shutdown was claimed, ignored: %s",
                    event.error,
                    exc_info=(type(event.error), event.error, event.error.__traceback__),
                )
            else:
                logger.debug("Ignoring %s, shutdown already handled", type(event).__name__)
            return None

        try:
            if self._session_state is not None:
                self._session_state.transition(SessionState.TERMINATING)
            engine_stopped: bool = True
            if isinstance(event, UserCloseResolved):
                engine_stopped = self.engineStop_await()
            outcome: ShutdownOutcome = self.outcome_produce(event)
            self._outcome = outcome
        finally:
            self._completed.set()

        if not engine_stopped:
            logger.error(
                "Engine did not stop within %.1fs, exiting with code %d",
                self._stop_grace_seconds,
                int(outcome.exit_code),
            )
            self._process_exit(int(outcome.exit_code))
        return outcome

    def engineStop_await(self) -> bool:
        """
        Ask a still running engine to stop and wait for it.

        Returns:
            True when the engine is idle.
        """
        if self._engine_idle.is_set():
            return True
        logger.info("Requesting engine stop")
        self._stop_signal.request()
        self._engine.stop_request()
        return self._engine_idle.wait(self._stop_grace_seconds)

    def outcome_produce(self, event: TerminationEvent) -> ShutdownOutcome:
        """
        Perform flush and reporting side effects for a claimed event.

        Args:
            event: Claimed terminal event.

        Returns:
            Shutdown outcome.
        """
        stream: TextIO = self._output or sys.stdout
        flush_attempted: bool = flushRequired_check(event)
        flush_succeeded: bool = self.diskChanges_flush() if flush_attempted else False
        if not flush_attempted:
            logger.info("Quitting without saving disk changes")

        if isinstance(event, EngineFault):
            self.faultDetails_report(event, stream)
        if self._stats_at_end:
            self.stats_report(event, stream)

        exit_code: ExitCode = ExitCode.FAULT if isinstance(event, EngineFault) else ExitCode.CLEAN
        logger.info(
            "Session ended: %s (exit %d)", terminationReason_describe(event), int(exit_code)
        )
        return ShutdownOutcome(
            event=event,
            flush_attempted=flush_attempted,
            flush_succeeded=flush_succeeded,
            exit_code=exit_code,
        )

    def diskChanges_flush(self) -> bool:
        """
        Save disk changes once; failures are reported and not retried.

        Returns:
            True if the backing store reported success.
        """
        try:
            saved: bool = self._handle.diskChanges_save()
        except Exception as exc:
            logger.error("Saving disk changes failed: %s", exc, exc_info=True)
            return False
        if not saved:
            logger.error("Saving disk changes failed (%s store)", self._handle.format_name)
        return saved

    def faultDetails_report(self, event: EngineFault, stream: TextIO) -> None:
        """
        Print the engine fault, regardless of the stats setting.

        Args:
            event: Engine fault.
            stream: Diagnostics stream.
        """
        stream.flush()
        print(f"\n## ST80 engine fault: {type(event.error).__name__}: {event.error}", file=stream)
        traceback.print_exception(type(event.error), event.error, event.error.__traceback__, file=stream)
        stream.flush()

    def stats_report(self, event: TerminationEvent, stream: TextIO) -> None:
        """
        Print the termination cause and interpreter statistics.

        Args:
            event: Claimed terminal event.
            stream: Diagnostics stream.
        """
        print(f"\n## terminating ST80, cause: {terminationReason_describe(event)}", file=stream)
        try:
            self._engine.stats_write(stream)
        except Exception as exc:
            logger.error("Writing interpreter statistics failed: %s", exc)
        stream.flush()
