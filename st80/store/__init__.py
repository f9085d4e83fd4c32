"""Backing-store discovery and persistence."""

from st80.store.backend import BackingStoreHandle, ProbeMiss, ProbeResult
from st80.store.resolver import PROBE_CHAIN, backingStore_resolve

__all__ = [
    "BackingStoreHandle",
    "PROBE_CHAIN",
    "ProbeMiss",
    "ProbeResult",
    "backingStore_resolve",
]
