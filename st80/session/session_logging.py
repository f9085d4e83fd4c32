"""
Session logging configuration helpers.

Every record written by the launcher's handlers carries the name of the
image being run, so the log of several concurrent sessions sharing one log
file can be told apart. The name is `-` until the session's image argument
has been parsed.
"""

from __future__ import annotations

import logging
from pathlib import Path

from st80 import __version__

__all__ = [
    "SessionNameFilter",
    "logFormatWithSession_get",
    "logging_setup",
    "sessionName_get",
    "sessionName_set",
]

_NO_SESSION: str = "-"


class SessionNameFilter(logging.Filter):
    """Stamps records with the current session name as `%(session)s`"""

    def __init__(self) -> None:
        super().__init__()
        self.session_name: str = _NO_SESSION

    def filter(self, record: logging.LogRecord) -> bool:
        record.session = self.session_name
        return True


_session_filter: SessionNameFilter = SessionNameFilter()


def sessionName_set(image_path: str | None) -> None:
    """
    Name the running session after its image.

    Args:
        image_path: Image argument; None clears the name.
    """
    name: str = Path(image_path).stem if image_path else ""
    _session_filter.session_name = name or _NO_SESSION


def sessionName_get() -> str:
    return _session_filter.session_name


def logging_setup(level: str, log_format: str, log_file: str | None) -> None:
    """
    Configure console and optional file handlers with session-tagged format.

    Args:
        level:
            Effective log level token (for example `INFO` or `DEBUG`).
        log_format:
            Base formatter string from config.
        log_file:
            Optional log file path, appended to.
    """
    formatter: logging.Formatter = logging.Formatter(logFormatWithSession_get(log_format))
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(_session_filter)

    logging.basicConfig(level=getattr(logging, level.upper()), handlers=handlers)


def logFormatWithSession_get(log_format: str) -> str:
    """
    Add launcher version and session name to a format string.

    The tag follows the timestamp when the format has one, otherwise it
    prefixes the whole line.

    Args:
        log_format:
            Base formatter string.

    Returns:
        Formatter string using the `session` record attribute.
    """
    tag: str = f"[st80 v{__version__} %(session)s]"
    if "%(asctime)s" in log_format:
        return log_format.replace("%(asctime)s", f"%(asctime)s {tag}", 1)
    return f"{tag} {log_format}"
