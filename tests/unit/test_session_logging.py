"""Unit tests for session-tagged logging setup"""

import logging
from unittest.mock import Mock

import pytest

from st80 import __version__
from st80.session import session_logging
from st80.session.session_logging import (
    SessionNameFilter,
    logFormatWithSession_get,
    logging_setup,
    sessionName_get,
    sessionName_set,
)


@pytest.fixture(autouse=True)
def clear_session_name():
    sessionName_set(None)
    yield
    sessionName_set(None)


def record_make(message: str = "hello") -> logging.LogRecord:
    return logging.LogRecord("st80.test", logging.INFO, __file__, 1, message, None, None)


class TestLogFormat:
    """Test format string tagging"""

    def test_tag_follows_timestamp(self):
        text = logFormatWithSession_get("%(asctime)s - %(levelname)s - %(message)s")
        assert text == f"%(asctime)s [st80 v{__version__} %(session)s] - %(levelname)s - %(message)s"

    def test_tag_prefixes_format_without_timestamp(self):
        assert logFormatWithSession_get("%(message)s") == f"[st80 v{__version__} %(session)s] %(message)s"


class TestSessionName:
    """Test the session name stamped on records"""

    def test_default_name(self):
        assert sessionName_get() == "-"

    def test_name_is_image_stem(self):
        sessionName_set("/images/Smalltalk80.im")
        assert sessionName_get() == "Smalltalk80"

    def test_filter_stamps_record(self):
        sessionName_set("world")
        record = record_make()

        assert session_logging._session_filter.filter(record) is True
        assert record.session == "world"

    def test_formatted_line(self):
        sessionName_set("world.im")
        log_filter = SessionNameFilter()
        log_filter.session_name = sessionName_get()
        record = record_make("booted")
        log_filter.filter(record)

        line = logging.Formatter(logFormatWithSession_get("%(message)s")).format(record)

        assert line == f"[st80 v{__version__} world] booted"


class TestLoggingSetup:
    """Test handler wiring"""

    def test_handlers_carry_filter_and_format(self, monkeypatch, tmp_path):
        basic_config = Mock()
        monkeypatch.setattr(session_logging.logging, "basicConfig", basic_config)

        logging_setup("debug", "%(message)s", str(tmp_path / "st80.log"))

        kwargs = basic_config.call_args.kwargs
        assert kwargs["level"] == logging.DEBUG
        handlers = kwargs["handlers"]
        assert len(handlers) == 2
        assert isinstance(handlers[1], logging.FileHandler)
        for handler in handlers:
            assert session_logging._session_filter in handler.filters
            assert "%(session)s" in handler.formatter._fmt
        handlers[1].close()

    def test_console_only_without_file(self, monkeypatch):
        basic_config = Mock()
        monkeypatch.setattr(session_logging.logging, "basicConfig", basic_config)

        logging_setup("INFO", "%(message)s", None)

        assert len(basic_config.call_args.kwargs["handlers"]) == 1
