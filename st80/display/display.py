"""X11 display connection and screen size lookup"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from Xlib import display as xdisplay
from Xlib.display import Display
from Xlib.error import DisplayError

from st80.common.types import ScreenSize

logger = logging.getLogger(__name__)


class ScreenProbe(Protocol):
    """Source of the physical screen size"""

    def screenSize_get(self) -> Optional[ScreenSize]:
        """
        Return the size of the default screen.

        Returns:
            Screen size, or None when no usable screen is available.
        """


class DisplayManager:
    """Manages X11 display connection and screen information"""

    def __init__(self, display_name: Optional[str] = None) -> None:
        """
        Initialize display manager

        Args:
            display_name: X11 display name (e.g., ':0'), None for default
        """
        self._display: Optional[Display] = None
        self._display_name: Optional[str] = display_name

    def connection_establish(self) -> None:
        """Establish connection to X11 display"""
        self._display = xdisplay.Display(self._display_name)

    def connection_close(self) -> None:
        """Close X11 display connection"""
        if self._display is not None:
            self._display.close()
            self._display = None

    def display_get(self) -> Display:
        """
        Get X11 display object

        Returns:
            X11 Display object

        Raises:
            RuntimeError: If not connected to display
        """
        if self._display is None:
            raise RuntimeError("Not connected to X11 display")
        return self._display

    def screenSize_get(self) -> Optional[ScreenSize]:
        """
        Get the root window size of the default screen.

        Connects on demand and closes the connection again when it opened it.

        Returns:
            Screen size, or None if the display server cannot be reached or
            reports an empty screen
        """
        opened_here: bool = self._display is None
        try:
            if opened_here:
                self.connection_establish()
            root = self.display_get().screen().root
            geom = root.get_geometry()
        except (DisplayError, OSError) as exc:
            logger.warning("Cannot query screen size from X11 display: %s", exc)
            return None
        finally:
            if opened_here:
                self.connection_close()

        if geom.width <= 0 or geom.height <= 0:
            logger.warning("X11 display reports unusable size %sx%s", geom.width, geom.height)
            return None
        return ScreenSize(width=geom.width, height=geom.height)
