"""st80 command-line interface"""

import argparse
import sys
from typing import NoReturn, Optional, Sequence

from st80.common.types import ExitCode
from st80.session.session_cli import arguments_parse, logLevelOverride_get


def main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main entry point for the st80 command

    Args:
        argv: Arguments without program name; None for sys.argv.
    """
    args, session_tokens = arguments_parse(argv)
    argsWithLogLevel_apply(args, logLevelOverride_get(args))

    try:
        from st80.session.session_logging import logging_setup
        from st80.session.session_runtime_coordinator import session_run

        exit_code: ExitCode = session_run(args, session_tokens, logging_setup)
    except KeyboardInterrupt:
        print("\nShutting down...")
        sys.exit(int(ExitCode.CLEAN))
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(int(ExitCode.FAULT))

    sys.exit(int(exit_code))


def argsWithLogLevel_apply(args: argparse.Namespace, log_level: Optional[str]) -> None:
    """
    Apply optional log level override to args.

    Args:
        args: Parsed CLI args.
        log_level: Optional log level string.
    """
    if log_level is not None:
        setattr(args, "log_level", log_level)


if __name__ == "__main__":
    main()
