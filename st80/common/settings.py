"""Application settings singleton - single source of truth for constants

This module provides a singleton Settings class that consolidates:
1. Machine constants (word-capacity limit, known display geometries)
2. Session constants (status text, usage text)

Runtime configuration from config.yml is passed explicitly as a Config.

Usage:
    from st80.common.settings import settings

    if geometry.word_capacity > settings.MAX_DISPLAY_WORDS:
        ...
"""

from typing import Optional


class Settings:
    """Singleton holder of the machine and session constants

    This class provides:
    - Machine constants of the emulated 16-bit Smalltalk-80 system
    - Launcher text constants

    The singleton pattern ensures all parts of the application use the same
    machine constants.
    """

    _instance: Optional["Settings"] = None

    def __new__(cls) -> "Settings":
        """Ensure only one Settings instance exists"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    # =========================================================================
    # Machine Constants
    # =========================================================================

    MAX_DISPLAY_WORDS: int = 65533
    """Largest display bitmap, in 16-bit words

    The display is a single word-indexable array object. Object sizes are
    16-bit values and the object header takes 2 words (length and class),
    so the bitmap can hold at most 0xFFFF - 2 words.
    """

    WINDOWED_WIDTH: int = 640
    WINDOWED_HEIGHT: int = 480
    """Initial geometry of the windowed display

    The image may change its display extent later, e.g.
    `DisplayScreen displayExtent: 1024@768`.
    """

    FALLBACK_WIDTH: int = 1152
    FALLBACK_HEIGHT: int = 862
    """Known working full-screen geometry (the Xerox 1186 screen)"""

    WINDOWED_SPACING: int = 2
    """Layout spacing around the display panel when decorated"""

    FULLSCREEN_SPACING: int = 0

    # =========================================================================
    # Session Constants
    # =========================================================================

    STATUS_IDLE_TEXT: str = " ST80 Engine not running"

    USAGE_TEXT: str = (
        "Usage: st80 [--statusline] [--stats] [--fullscreen] [--timeadjust:nn] "
        "[--tz:offset[:firstDay:lastDay]] image-file[.im]"
    )


# Global singleton instance
settings = Settings()
"""Global settings singleton instance

Import this anywhere in the application:
    from st80.common.settings import settings
"""
