"""
Session CLI parsing and option validation policies.

This module splits the command line into launcher options (handled by
argparse) and session tokens. Session tokens use the historical
`--option:value` grammar and are parsed leniently: an invalid value keeps the
previous setting and produces a warning instead of aborting.
"""

from __future__ import annotations

import argparse
import re
from collections.abc import Sequence

from st80 import __version__
from st80.common.config import (
    DAY_OF_YEAR_MAX,
    DAY_OF_YEAR_MIN,
    TZ_OFFSET_MAX,
    TZ_OFFSET_MIN,
    SessionConfig,
)
from st80.common.runtime_models import OptionsParseResult, SessionOptions
from st80.common.types import DisplayMode

__all__ = [
    "arguments_parse",
    "logLevelOverride_get",
    "sessionOptions_parse",
]

_OPTION_PREFIX: str = "--"
_TIMEADJUST_PREFIX: str = "--timeadjust:"
_TZ_PREFIX: str = "--tz:"
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

_SESSION_OPTIONS_HELP: str = """\
session options:
  --statusline                show the engine status line below the display
  --stats                     print interpreter statistics when the session ends
  --fullscreen                use the whole screen (disables the status line)
  --timeadjust:MINUTES        correct the Smalltalk clock by MINUTES
  --tz:OFFSET[:FIRST:LAST]    local time offset in minutes, optionally with the
                              first and last day-of-year of daylight saving time
"""


def arguments_parse(argv: Sequence[str] | None = None) -> tuple[argparse.Namespace, list[str]]:
    """
    Parse launcher arguments, leaving session tokens untouched.

    Args:
        argv:
            Argument list without program name; None for `sys.argv[1:]`.

    Returns:
        Tuple of `(namespace, session_tokens)`.
    """
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="st80",
        description="Smalltalk-80 engine - runs a virtual image with its disk files",
        epilog=_SESSION_OPTIONS_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )

    parser.add_argument("--version", action="version", version=f"st80 {__version__}")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config file (default: search standard locations)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging (overrides config)")
    parser.add_argument("--info", action="store_true", help="Enable info logging (overrides config)")
    parser.add_argument(
        "--warning", action="store_true", help="Enable warning logging (overrides config)"
    )
    parser.add_argument("--error", action="store_true", help="Enable error logging (overrides config)")
    parser.add_argument(
        "--critical", action="store_true", help="Enable critical logging (overrides config)"
    )

    args: argparse.Namespace
    session_tokens: list[str]
    args, session_tokens = parser.parse_known_args(argv)
    return args, session_tokens


def logLevelOverride_get(args: argparse.Namespace) -> str | None:
    """
    Resolve explicit log level override flags.

    Args:
        args: Parsed CLI args.

    Returns:
        Selected log level or None.
    """
    if args.critical:
        return "CRITICAL"
    if args.error:
        return "ERROR"
    if args.warning:
        return "WARNING"
    if args.info:
        return "INFO"
    if args.debug:
        return "DEBUG"
    return None


def sessionOptions_parse(
    tokens: Sequence[str],
    defaults: SessionConfig | None = None,
) -> OptionsParseResult:
    """
    Build session options from raw command-line tokens.

    Option names are matched case-insensitively. Parsing never raises; every
    rejected token is reported in the returned warnings.

    Args:
        tokens:
            Session tokens in command-line order.
        defaults:
            Prior clock values (from config.yml); built-in defaults when None.

    Returns:
        Parse result; `options` is None when no image path was given.
    """
    prior: SessionConfig = defaults if defaults is not None else SessionConfig()
    warnings: list[str] = []

    image_path: str | None = None
    status_line: bool = False
    stats_at_end: bool = False
    fullscreen: bool = False
    time_adjust: int | None = prior.time_adjust_minutes
    tz_offset: int = prior.tz_offset_minutes
    dst_first_day: int = prior.dst_first_day
    dst_last_day: int = prior.dst_last_day

    for token in tokens:
        lc_token: str = token.lower()
        if lc_token == "--statusline":
            status_line = True
        elif lc_token.startswith(_TIMEADJUST_PREFIX):
            minutes_text: str = token[len(_TIMEADJUST_PREFIX):]
            minutes: int | None = _integer_parse(minutes_text)
            if minutes is None:
                warnings.append(f"ignoring invalid argument '{minutes_text}' for --timeAdjust:")
            else:
                time_adjust = minutes
        elif lc_token == "--stats":
            stats_at_end = True
        elif lc_token == "--fullscreen":
            fullscreen = True
        elif lc_token.startswith(_TZ_PREFIX):
            tz_values: tuple[int, int, int] | None = tzOption_parse(
                token, tz_offset, dst_first_day, dst_last_day, warnings
            )
            if tz_values is not None:
                tz_offset, dst_first_day, dst_last_day = tz_values
        elif token.startswith(_OPTION_PREFIX):
            warnings.append(f"ignoring invalid option '{token}'")
        elif image_path is None and token:
            image_path = token
        else:
            warnings.append(f"ignoring argument '{token}'")

    if image_path is None:
        return OptionsParseResult(options=None, warnings=tuple(warnings))

    if fullscreen:
        status_line = False

    options: SessionOptions = SessionOptions(
        image_path=image_path,
        display_mode=DisplayMode.FULLSCREEN if fullscreen else DisplayMode.WINDOWED,
        status_line=status_line,
        stats_at_end=stats_at_end,
        tz_offset_minutes=tz_offset,
        dst_first_day=dst_first_day,
        dst_last_day=dst_last_day,
        time_adjust_minutes=time_adjust,
    )
    return OptionsParseResult(options=options, warnings=tuple(warnings))


def tzOption_parse(
    token: str,
    tz_offset: int,
    dst_first_day: int,
    dst_last_day: int,
    warnings: list[str],
) -> tuple[int, int, int] | None:
    """
    Parse one `--tz:` token as a single all-or-nothing update.

    Args:
        token:
            Full option token, e.g. `--tz:120:70:280`.
        tz_offset:
            Current offset in minutes.
        dst_first_day:
            Current first DST day-of-year.
        dst_last_day:
            Current last DST day-of-year.
        warnings:
            Warning sink.

    Returns:
        New `(offset, first_day, last_day)`, or None if the token is rejected.
    """
    values_text: str = token[len(_TZ_PREFIX):]
    parts: list[str] = values_text.split(":")
    # Trailing empty fields do not count: "--tz:120:" is an offset-only value
    if values_text:
        while parts and parts[-1] == "":
            parts.pop()
    if len(parts) not in (1, 3):
        warnings.append(f"ignoring invalid option with argument count '{token}'")
        return None

    offset: int | None = _integer_parse(parts[0])
    valid: bool = offset is not None and TZ_OFFSET_MIN <= offset <= TZ_OFFSET_MAX
    first_day: int | None = dst_first_day
    last_day: int | None = dst_last_day
    if len(parts) == 3:
        first_day = _integer_parse(parts[1])
        last_day = _integer_parse(parts[2])
        valid = valid and _dayOfYear_check(first_day) and _dayOfYear_check(last_day)

    if not valid or offset is None or first_day is None or last_day is None:
        warnings.append(f"ignoring option with invalid values '{token}'!")
        return None
    return offset, first_day, last_day


def _dayOfYear_check(day: int | None) -> bool:
    return day is not None and DAY_OF_YEAR_MIN <= day <= DAY_OF_YEAR_MAX


def _integer_parse(text: str) -> int | None:
    if not _INTEGER_RE.fullmatch(text):
        return None
    return int(text)
