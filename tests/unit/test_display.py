"""Unit tests for the X11 screen size lookup"""

from unittest.mock import Mock

import pytest
from Xlib.error import DisplayError

from st80.common.types import ScreenSize
from st80.display import display as display_module
from st80.display.display import DisplayManager


def fake_display(width: int, height: int) -> Mock:
    xdisplay = Mock()
    xdisplay.screen.return_value.root.get_geometry.return_value = Mock(width=width, height=height)
    return xdisplay


class TestDisplayManager:
    """Test DisplayManager connection handling"""

    def test_display_get_requires_connection(self):
        with pytest.raises(RuntimeError, match="Not connected"):
            DisplayManager().display_get()

    def test_screen_size(self, monkeypatch):
        xdisplay = fake_display(1280, 1024)
        connect = Mock(return_value=xdisplay)
        monkeypatch.setattr(display_module.xdisplay, "Display", connect)

        manager = DisplayManager(display_name=":1")
        assert manager.screenSize_get() == ScreenSize(1280, 1024)
        connect.assert_called_once_with(":1")
        xdisplay.close.assert_called_once()

    def test_screen_size_keeps_open_connection(self, monkeypatch):
        xdisplay = fake_display(800, 600)
        monkeypatch.setattr(display_module.xdisplay, "Display", Mock(return_value=xdisplay))

        manager = DisplayManager()
        manager.connection_establish()
        assert manager.screenSize_get() == ScreenSize(800, 600)
        xdisplay.close.assert_not_called()
        manager.connection_close()
        xdisplay.close.assert_called_once()

    def test_no_display_server(self, monkeypatch):
        """Test an unreachable display reports no screen"""
        monkeypatch.setattr(display_module.xdisplay, "Display", Mock(side_effect=DisplayError(":9")))
        assert DisplayManager(":9").screenSize_get() is None

    def test_empty_screen(self, monkeypatch):
        monkeypatch.setattr(display_module.xdisplay, "Display", Mock(return_value=fake_display(0, 0)))
        assert DisplayManager().screenSize_get() is None
