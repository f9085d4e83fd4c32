"""Fallback backing store for an image without any disk."""

from __future__ import annotations

import logging

from st80.common.config import StoreConfig
from st80.store.files import ImageFiles, imageFiles_derive
from st80.vm.backend import ObjectMemory

logger = logging.getLogger(__name__)

IMAGE_ONLY_FORMAT: str = "image-only"


class ImageOnlyStore:
    """Backing store that only knows the virtual image.

    There is no disk, so there are never disk changes; snapshots go back to
    the file the image was loaded from.
    """

    format_name: str = IMAGE_ONLY_FORMAT

    def __init__(self, memory: ObjectMemory) -> None:
        self._memory: ObjectMemory = memory

    def snapshotTarget_rename(self, name: str) -> None:
        """Ignored, snapshots always overwrite the loaded image."""
        logger.debug("Ignoring snapshot rename to '%s' (image-only mode)", name)

    def snapshot_save(self) -> bool:
        """Write the image back to its original location."""
        self._memory.image_save(None)
        return True

    def diskChanges_save(self) -> bool:
        """No disk, no changes."""
        return True


def imageOnlyStore_load(image_path: str, memory: ObjectMemory, store_config: StoreConfig) -> ImageOnlyStore:
    """
    Load the bare image into memory.

    Args:
        image_path: Image argument.
        memory: Object memory to load into.
        store_config: Artifact naming.

    Returns:
        Image-only store.

    Raises:
        FileNotFoundError: If the image file does not exist.
    """
    files: ImageFiles = imageFiles_derive(image_path, store_config.image_suffix)
    memory.image_load(str(files.image))
    logger.info("Loaded image %s without disk", files.image)
    return ImageOnlyStore(memory)
