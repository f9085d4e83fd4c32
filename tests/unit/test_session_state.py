"""Unit tests for the session lifecycle state machine"""

import pytest

from st80.common.errors import SessionStateError
from st80.session.state import SessionState, SessionStateMachine


class TestSessionStateMachine:
    """Test allowed and rejected transitions"""

    def test_starts_idle(self):
        assert SessionStateMachine().state == SessionState.IDLE

    def test_full_lifecycle(self):
        machine = SessionStateMachine()
        for target in (
            SessionState.RESOLVING,
            SessionState.NEGOTIATING,
            SessionState.CONFIGURING,
            SessionState.RUNNING,
            SessionState.TERMINATING,
            SessionState.STOPPED,
        ):
            machine.transition(target)
        assert machine.state == SessionState.STOPPED

    @pytest.mark.parametrize(
        "path",
        [
            [],
            [SessionState.RESOLVING],
            [SessionState.RESOLVING, SessionState.NEGOTIATING],
            [SessionState.RESOLVING, SessionState.NEGOTIATING, SessionState.CONFIGURING],
        ],
    )
    def test_startup_abort(self, path):
        """Test every startup phase may stop directly"""
        machine = SessionStateMachine()
        for target in path:
            machine.transition(target)
        machine.transition(SessionState.STOPPED)
        assert machine.state == SessionState.STOPPED

    def test_running_cannot_skip_terminating(self):
        machine = SessionStateMachine()
        for target in (
            SessionState.RESOLVING,
            SessionState.NEGOTIATING,
            SessionState.CONFIGURING,
            SessionState.RUNNING,
        ):
            machine.transition(target)
        with pytest.raises(SessionStateError, match="running -> stopped"):
            machine.transition(SessionState.STOPPED)
        assert machine.state == SessionState.RUNNING

    def test_stopped_is_final(self):
        machine = SessionStateMachine()
        machine.transition(SessionState.STOPPED)
        with pytest.raises(SessionStateError):
            machine.transition(SessionState.RESOLVING)

    def test_no_backwards_moves(self):
        machine = SessionStateMachine()
        machine.transition(SessionState.RESOLVING)
        with pytest.raises(SessionStateError):
            machine.transition(SessionState.IDLE)
