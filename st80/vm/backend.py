"""Collaborator protocols for the engine, object memory and peripherals."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Protocol, TextIO

if TYPE_CHECKING:
    from st80.store.backend import BackingStoreHandle

StatusConsumer = Callable[[str], None]


class StopSignal:
    """One-shot cooperative stop request.

    Written by the shutdown path, read by the engine at its safe points.
    Setting it never interrupts the engine.
    """

    def __init__(self) -> None:
        self._event: threading.Event = threading.Event()

    def request(self) -> None:
        """Ask the engine to stop at its next safe point."""
        self._event.set()

    def isRequested(self) -> bool:
        """Check whether a stop was requested."""
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until a stop is requested or the timeout passes."""
        return self._event.wait(timeout)


class Engine(Protocol):
    """Bytecode engine contract."""

    def firstContext_get(self) -> Any:
        """
        Return the suspended context stored in the loaded image.

        Returns:
            Opaque resume context.
        """

    def run(self, resume_context: Any) -> str:
        """
        Interpret until the engine quits by itself.

        Blocks the calling thread. Raises on unrecoverable faults.

        Args:
            resume_context: Context to continue.

        Returns:
            Quit reason text.
        """

    def stop_request(self) -> None:
        """Wake an engine blocked outside its safe points after the stop signal was set."""

    def statusConsumer_set(self, consumer: StatusConsumer | None) -> None:
        """
        Register the callback receiving status-line text.

        Args:
            consumer: Callback, or None to detach.
        """

    def stats_write(self, stream: TextIO) -> None:
        """
        Write interpreter statistics.

        Args:
            stream: Output stream.
        """


class ObjectMemory(Protocol):
    """Object memory contract."""

    def image_load(self, path: str) -> None:
        """
        Load a virtual image.

        Raises:
            FileNotFoundError: If the image file does not exist.
        """

    def image_save(self, path: str | None) -> None:
        """
        Write the virtual image.

        Args:
            path: Target file, or None for the file it was loaded from.
        """


class ClockDevice(Protocol):
    """Clock collaborator contract."""

    def localTimeParameters_set(self, offset_minutes: int, dst_first_day: int, dst_last_day: int) -> None:
        """Set time zone offset and daylight-saving window."""

    def timeAdjustment_set(self, minutes: int) -> None:
        """Set an explicit clock correction."""


class PersistentPeripheral(Protocol):
    """Collaborator that persists state through the backing store."""

    def backingStore_attach(self, handle: BackingStoreHandle) -> None:
        """
        Wire the session's backing store (called exactly once).

        Args:
            handle: Resolved backing store.
        """


@dataclass
class VirtualMachine:
    """
    Collaborator bundle produced by the configured VM factory.

    Attributes:
        engine:
            Bytecode engine.
        memory:
            Object memory the backing-store probes load into.
        clock:
            Clock device receiving time-zone parameters.
        peripherals:
            Collaborators that persist through the backing store.
        stop_signal:
            Cooperative stop flag; the factory hands the same instance to
            the engine, which polls it at its safe points.
    """

    engine: Engine
    memory: ObjectMemory
    clock: ClockDevice
    peripherals: list[PersistentPeripheral] = field(default_factory=list)
    stop_signal: StopSignal = field(default_factory=StopSignal)
