"""Unit tests for display geometry negotiation"""

from unittest.mock import Mock

import pytest

from st80.common.errors import GeometryError
from st80.common.settings import settings
from st80.common.types import DisplayMode, ScreenSize
from st80.display.geometry import (
    fallbackGeometry_get,
    geometry_fits,
    geometry_negotiate,
)


def probe_for(size):
    probe = Mock()
    probe.screenSize_get.return_value = size
    return probe


class TestGeometryFits:
    """Test the word-capacity limit"""

    def test_limit_boundary(self):
        # 65533 words: one word wide
        assert geometry_fits(16, 65533) is True
        assert geometry_fits(16, 65534) is False

    def test_common_screens(self):
        assert geometry_fits(1152, 862) is True
        assert geometry_fits(1024, 768) is True
        assert geometry_fits(1920, 1080) is False


class TestGeometryNegotiate:
    """Test mode-dependent geometry choice"""

    def test_windowed_ignores_probe(self):
        probe = probe_for(ScreenSize(1024, 768))
        geometry = geometry_negotiate(DisplayMode.WINDOWED, probe)
        assert (geometry.width, geometry.height) == (640, 480)
        assert geometry.fullscreen is False
        assert geometry.spacing == settings.WINDOWED_SPACING
        probe.screenSize_get.assert_not_called()

    def test_fullscreen_screen_fits(self):
        geometry = geometry_negotiate(DisplayMode.FULLSCREEN, probe_for(ScreenSize(1024, 768)))
        assert (geometry.width, geometry.height) == (1024, 768)
        assert geometry.fullscreen is True
        assert geometry.spacing == 0

    def test_fullscreen_too_large_uses_fallback(self):
        geometry = geometry_negotiate(DisplayMode.FULLSCREEN, probe_for(ScreenSize(1920, 1080)))
        assert (geometry.width, geometry.height) == (1152, 862)
        assert geometry.fullscreen is True
        assert geometry.word_capacity <= settings.MAX_DISPLAY_WORDS

    def test_fullscreen_without_screen(self):
        """Test no display server means a windowed display"""
        geometry = geometry_negotiate(DisplayMode.FULLSCREEN, probe_for(None))
        assert geometry.fullscreen is False
        assert (geometry.width, geometry.height) == (640, 480)

    def test_fullscreen_without_probe(self):
        assert geometry_negotiate(DisplayMode.FULLSCREEN, None).fullscreen is False


class TestFallbackGeometry:
    """Test fallback verification"""

    def test_fallback(self):
        geometry = fallbackGeometry_get()
        assert geometry.word_capacity == 72 * 862

    def test_fallback_over_limit_raises(self, monkeypatch):
        monkeypatch.setattr(type(settings), "FALLBACK_WIDTH", 4096)
        with pytest.raises(GeometryError):
            fallbackGeometry_get()
