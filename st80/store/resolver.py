"""
Backing-store resolution.

Formats are probed in order of capability, richest first. The first probe
that finds its artifacts loads the image and wins. Because loading changes
the object memory, no probe runs after one has started loading; a failure at
that point ends resolution instead of falling through.
"""

from __future__ import annotations

import logging
import sys
from typing import Callable, Sequence, TextIO

from st80.common.config import StoreConfig
from st80.common.errors import ImageNotFoundError, ResolutionError
from st80.store.backend import BackingStoreHandle, ProbeMiss, ProbeResult
from st80.store.disk_store import altoStore_probe, tajoStore_probe
from st80.store.image_only import imageOnlyStore_load
from st80.vm.backend import ObjectMemory

__all__ = [
    "PROBE_CHAIN",
    "StoreProbe",
    "backingStore_resolve",
]

logger = logging.getLogger(__name__)

StoreProbe = Callable[[str, ObjectMemory, StoreConfig], ProbeResult]

PROBE_CHAIN: tuple[StoreProbe, ...] = (altoStore_probe, tajoStore_probe)


def backingStore_resolve(
    image_path: str,
    memory: ObjectMemory,
    store_config: StoreConfig,
    probes: Sequence[StoreProbe] = PROBE_CHAIN,
    report_stream: TextIO | None = None,
) -> BackingStoreHandle:
    """
    Find the backing store for an image and load the image.

    Args:
        image_path:
            Image argument.
        memory:
            Object memory to load the image into.
        store_config:
            Artifact naming.
        probes:
            Disk-format probes in priority order.
        report_stream:
            Where diagnostics are printed before the image-only fallback;
            stdout when None.

    Returns:
        Backing store of the first matching format, or the image-only store.

    Raises:
        ImageNotFoundError:
            If no probe matched and the image file does not exist.
        ResolutionError:
            If a format failed while loading.
    """
    diagnostics: list[str] = []
    for probe in probes:
        try:
            result: ProbeResult = probe(image_path, memory, store_config)
        except (OSError, ValueError) as exc:
            raise ResolutionError(
                f"Loading '{image_path}' failed: {exc}", diagnostics="\n".join(diagnostics)
            ) from exc
        if isinstance(result, ProbeMiss):
            logger.debug("Probe %s: %s", result.format_name, result.reason)
            diagnostics.append(f"{result.format_name}: {result.reason}")
            continue
        logger.info("Backing store: %s", result.format_name)
        return result

    diagnostics_text: str = "\n".join(diagnostics)
    if diagnostics_text:
        print(diagnostics_text, file=report_stream or sys.stdout)

    try:
        handle: BackingStoreHandle = imageOnlyStore_load(image_path, memory, store_config)
    except FileNotFoundError as exc:
        raise ImageNotFoundError(f"Image '{image_path}' not found", diagnostics=diagnostics_text) from exc
    except (OSError, ValueError) as exc:
        raise ResolutionError(
            f"Loading '{image_path}' failed: {exc}", diagnostics=diagnostics_text
        ) from exc
    logger.info("Backing store: %s", handle.format_name)
    return handle
