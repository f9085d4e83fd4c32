"""Backing-store protocols for snapshot and disk persistence."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union


class BackingStoreHandle(Protocol):
    """Abstract persistence interface of one session's image and disk files."""

    format_name: str

    def snapshotTarget_rename(self, name: str) -> None:
        """
        Change the file name the next snapshot is written to.

        Args:
            name: New snapshot base name.
        """

    def snapshot_save(self) -> bool:
        """
        Write the full object memory to the snapshot target.

        Returns:
            True if the snapshot was written.
        """

    def diskChanges_save(self) -> bool:
        """
        Write pending disk modifications to the disk file.

        Returns:
            True if nothing was pending or the changes were written.
        """


@dataclass(frozen=True)
class ProbeMiss:
    """A probe did not find its artifacts; carries the diagnostic line."""

    format_name: str
    reason: str


ProbeResult = Union[BackingStoreHandle, ProbeMiss]
