"""
Disk-backed backing stores.

Both supported disk formats pair the virtual image with one disk file next to
it (Alto: `<base>.dsk`, Tajo/Dv6: `<base>.zdisk`). They share the persistence
behavior implemented here and differ only in the artifact they probe for.
"""

from __future__ import annotations

import logging
from pathlib import Path

from st80.common.config import StoreConfig
from st80.store.backend import ProbeMiss, ProbeResult
from st80.store.files import DiskFile, ImageFiles, imageFiles_derive
from st80.vm.backend import ObjectMemory

__all__ = [
    "ALTO_FORMAT",
    "TAJO_FORMAT",
    "DiskBackedStore",
    "altoStore_probe",
    "tajoStore_probe",
]

logger = logging.getLogger(__name__)

ALTO_FORMAT: str = "alto"
TAJO_FORMAT: str = "tajo"


class DiskBackedStore:
    """Backing store for an image with an attached emulated disk."""

    def __init__(
        self,
        format_name: str,
        files: ImageFiles,
        disk: DiskFile,
        memory: ObjectMemory,
        image_suffix: str = ".im",
    ) -> None:
        """
        Initialize disk-backed store.

        Args:
            format_name: Disk format identifier.
            files: Image file names.
            disk: Loaded disk buffer.
            memory: Object memory the image was loaded into.
            image_suffix: Suffix for snapshot files.
        """
        self.format_name: str = format_name
        self._files: ImageFiles = files
        self._disk: DiskFile = disk
        self._memory: ObjectMemory = memory
        self._image_suffix: str = image_suffix
        self._snapshot_image: Path = files.image

    @property
    def disk(self) -> DiskFile:
        """Disk buffer used by the disk controller peripherals"""
        return self._disk

    @property
    def snapshot_image(self) -> Path:
        """File the next snapshot is written to"""
        return self._snapshot_image

    def snapshotTarget_rename(self, name: str) -> None:
        """
        Redirect future snapshots to `<name>.im` beside the original image.

        Args:
            name: New base name; a trailing image suffix is accepted.
        """
        target: str = Path(name).name
        if not target.lower().endswith(self._image_suffix.lower()):
            target += self._image_suffix
        self._snapshot_image = self._files.image.with_name(target)
        logger.info("Snapshot target is now %s", self._snapshot_image)

    def snapshot_save(self) -> bool:
        """
        Save disk changes, then write the image to the snapshot target.

        Returns:
            True if both disk and image were written.
        """
        disk_saved: bool = self.diskChanges_save()
        try:
            self._memory.image_save(str(self._snapshot_image))
        except OSError as exc:
            logger.error("Snapshot to %s failed: %s", self._snapshot_image, exc)
            return False
        logger.info("Snapshot written to %s", self._snapshot_image)
        return disk_saved

    def diskChanges_save(self) -> bool:
        """
        Write modified disk content back to the disk file.

        Returns:
            True if the disk is clean afterwards, False if writing failed.
        """
        try:
            self._disk.save()
        except OSError as exc:
            logger.error("Saving disk changes to %s failed: %s", self._disk.path, exc)
            return False
        return True


def altoStore_probe(image_path: str, memory: ObjectMemory, store_config: StoreConfig) -> ProbeResult:
    """
    Probe for an image with an Alto disk.

    Args:
        image_path: Image argument.
        memory: Object memory to load into on success.
        store_config: Artifact naming.

    Returns:
        Store handle, or a probe miss.
    """
    return _diskStore_probe(ALTO_FORMAT, store_config.alto_disk_suffix, image_path, memory, store_config)


def tajoStore_probe(image_path: str, memory: ObjectMemory, store_config: StoreConfig) -> ProbeResult:
    """
    Probe for an image with a Tajo (Dv6) disk.

    Args:
        image_path: Image argument.
        memory: Object memory to load into on success.
        store_config: Artifact naming.

    Returns:
        Store handle, or a probe miss.
    """
    return _diskStore_probe(TAJO_FORMAT, store_config.tajo_disk_suffix, image_path, memory, store_config)


def _diskStore_probe(
    format_name: str,
    disk_suffix: str,
    image_path: str,
    memory: ObjectMemory,
    store_config: StoreConfig,
) -> ProbeResult:
    files: ImageFiles = imageFiles_derive(image_path, store_config.image_suffix)
    if not files.image.is_file():
        return ProbeMiss(format_name, f"image file '{files.image}' not found")

    disk_path: Path = files.sibling_get(disk_suffix)
    if not disk_path.is_file():
        return ProbeMiss(format_name, f"no {format_name} disk file '{disk_path}'")

    # Object memory is modified from here on; failures are no longer a miss
    memory.image_load(str(files.image))
    disk: DiskFile = DiskFile.load(disk_path)
    logger.info("Loaded image %s with %s disk %s", files.image, format_name, disk_path)
    return DiskBackedStore(
        format_name=format_name,
        files=files,
        disk=disk,
        memory=memory,
        image_suffix=store_config.image_suffix,
    )
