"""Unit tests for the settings singleton"""

from st80.common.settings import Settings, settings
from st80.common.types import wordCapacity_compute


class TestSettingsSingleton:
    """Test singleton behavior"""

    def test_same_instance(self):
        assert Settings() is settings


class TestMachineConstants:
    """Test display constants are consistent"""

    def test_display_word_limit(self):
        assert settings.MAX_DISPLAY_WORDS == 0xFFFF - 2

    def test_fallback_fits(self):
        """Test the fallback geometry fits the display object"""
        assert wordCapacity_compute(settings.FALLBACK_WIDTH, settings.FALLBACK_HEIGHT) == 62064
        assert wordCapacity_compute(settings.FALLBACK_WIDTH, settings.FALLBACK_HEIGHT) <= settings.MAX_DISPLAY_WORDS

    def test_windowed_geometry(self):
        assert (settings.WINDOWED_WIDTH, settings.WINDOWED_HEIGHT) == (640, 480)
