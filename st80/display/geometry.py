"""
Display geometry negotiation.

The Smalltalk display bitmap is one word-indexable array object of the 16-bit
machine. Its size field limits the bitmap to 65533 words (0xFFFF minus 2
header words for length and class), so for a one-bit-per-pixel display
`ceil(width / 16) * height <= 65533` must hold. Screens that are too large
get a known working geometry instead.
"""

from __future__ import annotations

import logging
from typing import Optional

from st80.common.errors import GeometryError
from st80.common.settings import settings
from st80.common.types import DisplayGeometry, DisplayMode, ScreenSize, wordCapacity_compute
from st80.display.display import ScreenProbe

__all__ = [
    "fallbackGeometry_get",
    "geometry_fits",
    "geometry_negotiate",
    "windowedGeometry_get",
]

logger = logging.getLogger(__name__)


def geometry_fits(width: int, height: int) -> bool:
    """
    Check a geometry against the display word-capacity limit.

    Args:
        width: Pixel width.
        height: Pixel height.

    Returns:
        True when the bitmap fits into one display object.
    """
    return wordCapacity_compute(width, height) <= settings.MAX_DISPLAY_WORDS


def windowedGeometry_get() -> DisplayGeometry:
    """Default geometry of the decorated window."""
    return DisplayGeometry(
        width=settings.WINDOWED_WIDTH,
        height=settings.WINDOWED_HEIGHT,
        fullscreen=False,
        spacing=settings.WINDOWED_SPACING,
    )


def fallbackGeometry_get() -> DisplayGeometry:
    """
    Known working full-screen geometry, re-verified against the limit.

    Raises:
        GeometryError: If the configured fallback does not fit.
    """
    width: int = settings.FALLBACK_WIDTH
    height: int = settings.FALLBACK_HEIGHT
    if not geometry_fits(width, height):
        raise GeometryError(
            f"Fallback geometry {width}x{height} needs {wordCapacity_compute(width, height)} words, "
            f"limit is {settings.MAX_DISPLAY_WORDS}"
        )
    return DisplayGeometry(width=width, height=height, fullscreen=True, spacing=settings.FULLSCREEN_SPACING)


def geometry_negotiate(display_mode: DisplayMode, screen_probe: Optional[ScreenProbe]) -> DisplayGeometry:
    """
    Compute the display geometry for the requested mode.

    Args:
        display_mode:
            Requested display mode.
        screen_probe:
            Source of the physical screen size; only asked in full-screen mode.

    Returns:
        Geometry whose word capacity does not exceed the limit.
    """
    if display_mode == DisplayMode.WINDOWED:
        return windowedGeometry_get()

    screen_size: Optional[ScreenSize] = screen_probe.screenSize_get() if screen_probe else None
    if screen_size is None:
        logger.warning("Full screen not available, using windowed display")
        return windowedGeometry_get()

    if geometry_fits(screen_size.width, screen_size.height):
        logger.info("Full screen display: %sx%s", screen_size.width, screen_size.height)
        return DisplayGeometry(
            width=screen_size.width,
            height=screen_size.height,
            fullscreen=True,
            spacing=settings.FULLSCREEN_SPACING,
        )

    fallback: DisplayGeometry = fallbackGeometry_get()
    logger.info(
        "Screen %sx%s needs %s display words (limit %s), using %sx%s",
        screen_size.width,
        screen_size.height,
        wordCapacity_compute(screen_size.width, screen_size.height),
        settings.MAX_DISPLAY_WORDS,
        fallback.width,
        fallback.height,
    )
    return fallback
