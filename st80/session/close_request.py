"""
Close-request channel and resolution worker.

The windowing layer and the signal handlers only post messages here; they
never block on the decision or on shutdown. A daemon worker thread takes
each request, asks the close decider for one of the three choices and hands
the resolved event to the shutdown coordinator.
"""

from __future__ import annotations

import logging
import queue
import signal
import sys
import threading
from types import FrameType
from typing import Any, Callable, Protocol, TextIO, Union

from st80.common.types import CloseChoice, ShutdownOutcome, UserCloseRequest, UserCloseResolved

__all__ = [
    "CloseRequestChannel",
    "CloseRequestWorker",
    "ConsoleCloseDecider",
    "SignalBridge",
]

logger = logging.getLogger(__name__)

CloseMessage = Union[UserCloseRequest, UserCloseResolved]

CLOSE_PROMPT_LINES: tuple[str, ...] = (
    "The Smalltalk-80 engine should be closed using the rootwindow context menu.",
    "Closing the main window will not snapshot the Smalltalk state, but disk changes can be saved.",
    "If the disk is not saved, all changes in this session will be lost.",
    "How do you want to proceed?",
)

_CHOICE_ORDER: tuple[CloseChoice, ...] = (
    CloseChoice.CONTINUE,
    CloseChoice.SAVE_AND_QUIT,
    CloseChoice.QUIT_WITHOUT_SAVING,
)
_CHOICE_LABELS: dict[CloseChoice, str] = {
    CloseChoice.CONTINUE: "Continue",
    CloseChoice.SAVE_AND_QUIT: "Save disk and quit",
    CloseChoice.QUIT_WITHOUT_SAVING: "Quit without saving",
}


class CloseDecider(Protocol):
    """Asks the user what a close gesture should do."""

    def __call__(self) -> CloseChoice:
        """Return the chosen action."""
        ...


class TerminationSink(Protocol):
    """Receiver of resolved close events (the shutdown coordinator)."""

    def terminationEvent_handle(self, event: UserCloseResolved) -> ShutdownOutcome | None:
        """Handle a resolved close event."""
        ...


class CloseRequestChannel:
    """One-way message channel from the UI/signal layer to the worker.

    Backed by `queue.SimpleQueue`, whose `put` may be called from signal
    handlers.
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[CloseMessage | None] = queue.SimpleQueue()

    def post(self, message: CloseMessage) -> None:
        """Queue a close request or an already resolved close."""
        self._queue.put(message)

    def close(self) -> None:
        """Wake the worker so it can exit."""
        self._queue.put(None)

    def take(self, timeout: float | None = None) -> CloseMessage | None:
        """
        Take the next message.

        Returns:
            Next message, or None when the channel was closed or timed out.
        """
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None


class ConsoleCloseDecider:
    """Three-choice close question on the terminal."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output: TextIO | None = None,
    ) -> None:
        self._input_func: Callable[[str], str] = input_func
        self._output: TextIO | None = output

    def __call__(self) -> CloseChoice:
        stream: TextIO = self._output or sys.stderr
        print("\nSmalltalk-80 Engine is currently running", file=stream)
        for line in CLOSE_PROMPT_LINES:
            print(f"  {line}", file=stream)
        for index, choice in enumerate(_CHOICE_ORDER, start=1):
            print(f"  [{index}] {_CHOICE_LABELS[choice]}", file=stream)
        stream.flush()
        try:
            answer: str = self._input_func("Choice [1]: ")
        except EOFError:
            return CloseChoice.CONTINUE
        return closeChoice_parse(answer)


def closeChoice_parse(answer: str) -> CloseChoice:
    """
    Map a typed answer to a close choice.

    Args:
        answer: Number (1-3) or label prefix.

    Returns:
        Chosen action; CONTINUE when empty or unknown.
    """
    text: str = answer.strip().lower()
    if not text:
        return CloseChoice.CONTINUE
    if text.isdigit():
        index: int = int(text) - 1
        if 0 <= index < len(_CHOICE_ORDER):
            return _CHOICE_ORDER[index]
        return CloseChoice.CONTINUE
    for choice in _CHOICE_ORDER:
        if _CHOICE_LABELS[choice].lower().startswith(text):
            return choice
    return CloseChoice.CONTINUE


class CloseRequestWorker:
    """Resolves close requests off the posting thread."""

    def __init__(
        self,
        channel: CloseRequestChannel,
        decider: CloseDecider,
        sink: TerminationSink,
    ) -> None:
        self._channel: CloseRequestChannel = channel
        self._decider: CloseDecider = decider
        self._sink: TerminationSink = sink
        self._thread: threading.Thread | None = None
        self._running: bool = False

    def start(self) -> None:
        """Start the daemon worker thread."""
        self._running = True
        self._thread = threading.Thread(target=self._requests_loop, name="st80-close-requests", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 1.0) -> None:
        """Stop the worker; a pending terminal question is abandoned."""
        self._running = False
        self._channel.close()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def message_process(self, message: CloseMessage) -> ShutdownOutcome | None:
        """
        Resolve one message and forward it.

        Args:
            message: Close request or resolved close.

        Returns:
            Outcome if the forwarded event ended the session.
        """
        resolved: UserCloseResolved
        if isinstance(message, UserCloseRequest):
            choice: CloseChoice = self._decider()
            logger.info("Close request resolved: %s", _CHOICE_LABELS[choice])
            resolved = UserCloseResolved(choice=choice)
        else:
            resolved = message
        return self._sink.terminationEvent_handle(resolved)

    def _requests_loop(self) -> None:
        while self._running:
            message: CloseMessage | None = self._channel.take()
            if message is None or not self._running:
                break
            try:
                self.message_process(message)
            except Exception as exc:
                logger.error("Close request handling failed: %s", exc, exc_info=True)


SignalHandler = Union[Callable[[int, Any], Any], int, None]


class SignalBridge:
    """Turns POSIX signals into close-channel messages while a session runs.

    SIGINT asks the user (UserCloseRequest); SIGTERM saves the disk and quits.
    """

    def __init__(self, channel: CloseRequestChannel) -> None:
        self._channel: CloseRequestChannel = channel
        self._previous: dict[int, SignalHandler] = {}

    def install(self) -> bool:
        """
        Install handlers; only possible on the main thread.

        Returns:
            True if handlers were installed.
        """
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on main thread, signal handlers not installed")
            return False
        self._previous[signal.SIGINT] = signal.signal(signal.SIGINT, self.signal_handle)
        self._previous[signal.SIGTERM] = signal.signal(signal.SIGTERM, self.signal_handle)
        return True

    def restore(self) -> None:
        """Put the previous handlers back."""
        for signum, handler in self._previous.items():
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
        self._previous.clear()

    def signal_handle(self, signum: int, _frame: FrameType | None) -> None:
        """
        Post the close message for a received signal.

        Args:
            signum: Received signal number.
            _frame: Python frame object (unused).
        """
        if signum == signal.SIGTERM:
            self._channel.post(UserCloseResolved(choice=CloseChoice.SAVE_AND_QUIT))
        else:
            self._channel.post(UserCloseRequest())
