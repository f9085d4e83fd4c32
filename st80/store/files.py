"""Image/disk file naming and the in-memory disk file buffer."""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageFiles:
    """File names derived from the image argument"""
    base: Path
    image: Path

    def sibling_get(self, suffix: str) -> Path:
        """Path of the artifact with the same base name and the given suffix"""
        return self.base.with_name(self.base.name + suffix)


def imageFiles_derive(image_arg: str, image_suffix: str = ".im") -> ImageFiles:
    """
    Derive base name and image file from the image argument.

    `name.im` and `name` both refer to the image `name.im`; a suffix-less
    argument that exists as-is (and `name.im` does not) is used directly.

    Args:
        image_arg: Image path as given on the command line.
        image_suffix: Image file suffix.

    Returns:
        Derived file names.
    """
    path: Path = Path(image_arg).expanduser()
    if path.name.lower().endswith(image_suffix.lower()) and len(path.name) > len(image_suffix):
        base: Path = path.with_name(path.name[: -len(image_suffix)])
        return ImageFiles(base=base, image=path)

    suffixed: Path = path.with_name(path.name + image_suffix)
    if not suffixed.exists() and path.is_file():
        return ImageFiles(base=path, image=path)
    return ImageFiles(base=path, image=suffixed)


class DiskFile:
    """Whole-file buffer of an emulated disk

    Disk controllers read and write through this buffer; `save()` writes it
    back only when something changed.
    """

    def __init__(self, path: Path, content: bytes) -> None:
        self._path: Path = path
        self._content: bytearray = bytearray(content)
        self._dirty: bool = False

    @classmethod
    def load(cls, path: Path) -> "DiskFile":
        """
        Read a disk file.

        Raises:
            OSError: If the file cannot be read
        """
        with open(path, "rb") as f:
            content: bytes = f.read()
        logger.debug("Loaded disk %s (%d bytes)", path, len(content))
        return cls(path, content)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def __len__(self) -> int:
        return len(self._content)

    def read(self, offset: int, length: int) -> bytes:
        """Read `length` bytes starting at `offset`"""
        self._range_check(offset, length)
        return bytes(self._content[offset:offset + length])

    def write(self, offset: int, data: bytes) -> None:
        """Overwrite bytes starting at `offset` and mark the disk modified"""
        self._range_check(offset, len(data))
        self._content[offset:offset + len(data)] = data
        self._dirty = True

    def save(self) -> bool:
        """
        Write the buffer back if modified.

        The file is replaced atomically so an interrupted save never leaves a
        truncated disk behind.

        Returns:
            True if the file was written, False if there was nothing to write.

        Raises:
            OSError: If writing fails
        """
        if not self._dirty:
            return False
        directory: Path = self._path.parent
        fd, tmp_name = tempfile.mkstemp(prefix=self._path.name + ".", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(self._content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        self._dirty = False
        logger.info("Saved disk changes to %s", self._path)
        return True

    def _range_check(self, offset: int, length: int) -> None:
        if offset < 0 or length < 0 or offset + length > len(self._content):
            raise IndexError(
                f"Disk access out of range: offset={offset} length={length} size={len(self._content)}"
            )
