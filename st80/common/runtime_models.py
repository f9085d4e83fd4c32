"""Typed runtime models for session orchestration."""

from __future__ import annotations

from dataclasses import dataclass, field

from st80.common.types import DisplayMode


@dataclass(frozen=True)
class SessionOptions:
    """Validated startup parameters of one session."""

    image_path: str
    display_mode: DisplayMode
    status_line: bool
    stats_at_end: bool
    tz_offset_minutes: int
    dst_first_day: int
    dst_last_day: int
    time_adjust_minutes: int | None

    def __post_init__(self) -> None:
        if not self.image_path:
            raise ValueError("image_path must not be empty")


@dataclass(frozen=True)
class OptionsParseResult:
    """Outcome of token parsing; `options` is None when no image was given."""

    options: SessionOptions | None
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def image_missing(self) -> bool:
        """True when no image path was supplied."""
        return self.options is None
