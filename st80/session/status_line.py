"""Engine status-line text holder."""

from __future__ import annotations

import logging
import threading

from st80.common.settings import settings

logger = logging.getLogger(__name__)


class StatusLine:
    """Latest status text reported by the engine.

    The engine calls `text_set` from its own thread; the UI layer reads
    `text` whenever it repaints.
    """

    def __init__(self) -> None:
        self._lock: threading.Lock = threading.Lock()
        self._text: str = settings.STATUS_IDLE_TEXT

    @property
    def text(self) -> str:
        with self._lock:
            return self._text

    def text_set(self, text: str) -> None:
        with self._lock:
            self._text = text
        logger.debug("[STATUS] %s", text)

    def reset(self) -> None:
        self.text_set(settings.STATUS_IDLE_TEXT)
