"""Session bootstrap helpers for config, logging, and collaborator wiring."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml

from st80.common.config import Config, ConfigLoader
from st80.common.errors import ConfigError, VmFactoryError
from st80.common.runtime_models import OptionsParseResult
from st80.session.session_cli import sessionOptions_parse
from st80.store.backend import BackingStoreHandle
from st80.vm.backend import ClockDevice, PersistentPeripheral, VirtualMachine
from st80.vm.factory import virtualMachine_create

logger = logging.getLogger(__name__)


def configFromArgs_load(args: argparse.Namespace) -> Config:
    """
    Load config from the CLI path or the default locations.

    Args:
        args: Parsed CLI args.

    Returns:
        Loaded config.
    """
    config_path: Path | None = Path(args.config) if args.config else None
    try:
        config: Config = ConfigLoader.config_load(file_path=config_path)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Create a config.yml file or specify path with --config", file=sys.stderr)
        sys.exit(1)
    except (ConfigError, yaml.YAMLError, OSError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)
    return config


def loggingWithConfig_setup(args: argparse.Namespace, config: Config, logging_setup_func) -> None:
    """
    Setup logging from config and optional CLI override.

    Args:
        args: Parsed CLI args.
        config: Loaded config.
        logging_setup_func: Logging setup callback.
    """
    log_level: str = getattr(args, "log_level", None) or config.logging.level
    logging_setup_func(log_level, config.logging.format, config.logging.file)


def sessionOptionsWithWarnings_parse(tokens: list[str], config: Config) -> OptionsParseResult:
    """
    Parse session tokens against config defaults and report warnings.

    Args:
        tokens: Session tokens.
        config: Loaded config.

    Returns:
        Parse result.
    """
    result: OptionsParseResult = sessionOptions_parse(tokens, config.session)
    for warning in result.warnings:
        logger.warning(warning)
    return result


def virtualMachine_initialize(config: Config) -> VirtualMachine:
    """
    Create the virtual machine collaborators.

    Args:
        config: Loaded config.

    Returns:
        Virtual machine bundle.
    """
    try:
        return virtualMachine_create(config)
    except VmFactoryError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def clockParameters_apply(
    clock: ClockDevice,
    tz_offset_minutes: int,
    dst_first_day: int,
    dst_last_day: int,
    time_adjust_minutes: int | None,
) -> None:
    """
    Push time zone and clock correction into the clock device.

    Args:
        clock: Clock collaborator.
        tz_offset_minutes: Local offset from UTC.
        dst_first_day: First day-of-year of daylight saving time.
        dst_last_day: Last day-of-year of daylight saving time.
        time_adjust_minutes: Optional explicit correction.
    """
    if time_adjust_minutes is not None:
        clock.timeAdjustment_set(time_adjust_minutes)
        logger.info("Time adjustment: %s minutes", time_adjust_minutes)
    clock.localTimeParameters_set(tz_offset_minutes, dst_first_day, dst_last_day)
    logger.info(
        "Local time: offset %s minutes, DST days %s..%s",
        tz_offset_minutes,
        dst_first_day,
        dst_last_day,
    )


def backingStore_attach(peripherals: list[PersistentPeripheral], handle: BackingStoreHandle) -> None:
    """
    Hand the backing store to every persisting collaborator.

    Args:
        peripherals: Collaborators from the VM bundle.
        handle: Resolved backing store.
    """
    for peripheral in peripherals:
        peripheral.backingStore_attach(handle)
    logger.debug("Backing store attached to %d collaborators", len(peripherals))
