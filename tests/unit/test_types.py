"""Unit tests for common types (DisplayGeometry, termination events)"""

import pytest

from st80.common.runtime_models import SessionOptions
from st80.common.types import (
    CloseChoice,
    DisplayGeometry,
    DisplayMode,
    EngineFault,
    EngineQuit,
    UserCloseRequest,
    UserCloseResolved,
    terminationReason_describe,
    wordCapacity_compute,
)


class TestWordCapacity:
    """Test display word count computation"""

    def test_exact_multiple(self):
        assert wordCapacity_compute(640, 480) == 40 * 480

    def test_partial_word_rounds_up(self):
        assert wordCapacity_compute(17, 10) == 20
        assert wordCapacity_compute(1, 1) == 1


class TestDisplayGeometry:
    """Test DisplayGeometry dataclass"""

    def test_word_capacity(self):
        geometry = DisplayGeometry(width=1152, height=862, fullscreen=True, spacing=0)
        assert geometry.word_capacity == 62064

    def test_rejects_non_positive(self):
        with pytest.raises(ValueError):
            DisplayGeometry(width=0, height=480)
        with pytest.raises(ValueError):
            DisplayGeometry(width=640, height=-1)

    def test_immutable(self):
        geometry = DisplayGeometry(width=640, height=480)
        with pytest.raises(AttributeError):
            geometry.width = 800


class TestTerminationEvents:
    """Test termination event helpers"""

    def test_is_terminal(self):
        assert UserCloseResolved(CloseChoice.SAVE_AND_QUIT).isTerminal() is True
        assert UserCloseResolved(CloseChoice.QUIT_WITHOUT_SAVING).isTerminal() is True
        assert UserCloseResolved(CloseChoice.CONTINUE).isTerminal() is False

    def test_describe(self):
        assert terminationReason_describe(EngineQuit("quit primitive")) == "quit primitive"
        assert terminationReason_describe(EngineFault(ValueError("bad oop"))) == "fault (ValueError: bad oop)"
        assert (
            terminationReason_describe(UserCloseResolved(CloseChoice.SAVE_AND_QUIT))
            == "close window (saving disk)"
        )
        assert (
            terminationReason_describe(UserCloseResolved(CloseChoice.QUIT_WITHOUT_SAVING))
            == "close window (without saving disk)"
        )
        assert terminationReason_describe(UserCloseRequest()) == "close window (pending)"


class TestSessionOptions:
    """Test SessionOptions validation"""

    def test_empty_image_rejected(self):
        with pytest.raises(ValueError):
            SessionOptions(
                image_path="",
                display_mode=DisplayMode.WINDOWED,
                status_line=False,
                stats_at_end=False,
                tz_offset_minutes=0,
                dst_first_day=0,
                dst_last_day=0,
                time_adjust_minutes=None,
            )
