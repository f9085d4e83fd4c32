"""Exception hierarchy for st80"""

from __future__ import annotations


class St80Error(Exception):
    """Base class for launcher errors"""


class ConfigError(St80Error):
    """Config file content is invalid"""


class ResolutionError(St80Error):
    """No backing store could be resolved for an image"""

    def __init__(self, message: str, diagnostics: str = "") -> None:
        super().__init__(message)
        self.diagnostics: str = diagnostics


class ImageNotFoundError(ResolutionError):
    """No probe matched and the image file itself does not exist"""


class GeometryError(St80Error):
    """A display geometry violates the word-capacity limit"""


class SessionStateError(St80Error):
    """Illegal session state transition"""


class VmFactoryError(St80Error):
    """The configured virtual machine factory could not be loaded"""
