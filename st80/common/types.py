"""Common types and data structures for st80"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Union

WORD_BITS: int = 16


class DisplayMode(Enum):
    """Requested display surface mode"""
    WINDOWED = "windowed"
    FULLSCREEN = "fullscreen"


class ExitCode(IntEnum):
    """Process exit classification"""
    CLEAN = 0
    FAULT = 1
    NO_WORK = 2  # No image given, nothing was started


class CloseChoice(Enum):
    """Answers to the three-way close question"""
    CONTINUE = "continue"
    SAVE_AND_QUIT = "save_and_quit"
    QUIT_WITHOUT_SAVING = "quit_without_saving"


@dataclass(frozen=True)
class ScreenSize:
    """Physical screen dimensions as reported by the display server"""
    width: int
    height: int


@dataclass(frozen=True)
class DisplayGeometry:
    """Negotiated size of the emulated display bitmap"""
    width: int
    height: int
    fullscreen: bool = False
    spacing: int = 2

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Display geometry must be positive, got {self.width}x{self.height}")

    @property
    def word_capacity(self) -> int:
        """Number of 16-bit words needed to hold the bitmap"""
        return wordCapacity_compute(self.width, self.height)


def wordCapacity_compute(width: int, height: int) -> int:
    """
    Compute the word count of a one-bit-per-pixel bitmap.

    Args:
        width: Pixel width.
        height: Pixel height.

    Returns:
        ceil(width / 16) * height
    """
    return ((width + WORD_BITS - 1) // WORD_BITS) * height


@dataclass(frozen=True)
class EngineQuit:
    """Engine stopped cooperatively"""
    reason: str


@dataclass(frozen=True)
class EngineFault:
    """Engine raised an unrecoverable condition"""
    error: BaseException


@dataclass(frozen=True)
class UserCloseRequest:
    """Close gesture observed, decision still pending"""


@dataclass(frozen=True)
class UserCloseResolved:
    """Close gesture with the user's decision"""
    choice: CloseChoice

    def isTerminal(self) -> bool:
        """Check if the decision ends the session"""
        return self.choice != CloseChoice.CONTINUE


TerminationEvent = Union[EngineQuit, EngineFault, UserCloseRequest, UserCloseResolved]


def terminationReason_describe(event: TerminationEvent) -> str:
    """
    Describe a termination event for the exit diagnostics header.

    Args:
        event: Termination event.

    Returns:
        Human readable cause.
    """
    if isinstance(event, EngineQuit):
        return event.reason
    if isinstance(event, EngineFault):
        return f"fault ({type(event.error).__name__}: {event.error})"
    if isinstance(event, UserCloseResolved):
        if event.choice == CloseChoice.SAVE_AND_QUIT:
            return "close window (saving disk)"
        if event.choice == CloseChoice.QUIT_WITHOUT_SAVING:
            return "close window (without saving disk)"
        return "close window (continue)"
    return "close window (pending)"


@dataclass(frozen=True)
class ShutdownOutcome:
    """Result of acting on the first terminal event of a session"""
    event: TerminationEvent
    flush_attempted: bool
    flush_succeeded: bool
    exit_code: ExitCode
