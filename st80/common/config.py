"""Configuration file loading and management"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from st80.common.errors import ConfigError

DEFAULT_TZ_OFFSET_MINUTES: int = 60  # CET ~ Berlin
DEFAULT_DST_FIRST_DAY: int = 31 + 28 + 31 - 6  # Sunday at or before 31.03.
DEFAULT_DST_LAST_DAY: int = 31 + 28 + 31 + 30 + 31 + 30 + 31 + 31 + 30 + 31 - 6  # ... 31.10.

TZ_OFFSET_MIN: int = -720
TZ_OFFSET_MAX: int = 780
DAY_OF_YEAR_MIN: int = 0
DAY_OF_YEAR_MAX: int = 366


@dataclass
class SessionConfig:
    """Session defaults, overridable from the command line"""
    tz_offset_minutes: int = DEFAULT_TZ_OFFSET_MINUTES
    dst_first_day: int = DEFAULT_DST_FIRST_DAY
    dst_last_day: int = DEFAULT_DST_LAST_DAY
    time_adjust_minutes: Optional[int] = None
    stop_grace_seconds: float = 5.0


@dataclass
class StoreConfig:
    """File naming of the backing-store artifacts"""
    image_suffix: str = ".im"
    alto_disk_suffix: str = ".dsk"
    tajo_disk_suffix: str = ".zdisk"


@dataclass
class DisplayConfig:
    """Display server settings"""
    display: Optional[str] = None  # X11 display name, None for $DISPLAY


@dataclass
class VmConfig:
    """Virtual machine implementation settings"""
    factory: Optional[str] = None  # "package.module:callable"


@dataclass
class LoggingConfig:
    """Logging configuration settings"""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class Config:
    """Complete application configuration"""
    session: SessionConfig = field(default_factory=SessionConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    vm: VmConfig = field(default_factory=VmConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigLoader:
    """Loads and parses configuration from YAML files"""

    DEFAULT_CONFIG_PATHS = [
        "config.yml",
        "~/.config/st80/config.yml",
        "/etc/st80/config.yml",
    ]

    @staticmethod
    def configFile_find() -> Optional[Path]:
        """
        Find configuration file in standard locations

        Returns:
            Path to config file, or None if not found
        """
        for config_path in ConfigLoader.DEFAULT_CONFIG_PATHS:
            path = Path(config_path).expanduser().resolve()
            if path.exists() and path.is_file():
                return path
        return None

    @staticmethod
    def yaml_load(file_path: Path) -> Dict[str, Any]:
        """
        Load YAML configuration file

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError: If file does not exist
            yaml.YAMLError: If file is not valid YAML
            ConfigError: If the document is not a mapping
        """
        with open(file_path, "r") as f:
            data = yaml.safe_load(f)

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {file_path} must contain a YAML dictionary")

        return data

    @staticmethod
    def config_parse(data: Dict[str, Any]) -> Config:
        """
        Parse configuration dictionary into Config object

        Every section is optional; missing keys keep the built-in defaults.

        Args:
            data: Raw configuration dictionary

        Returns:
            Parsed Config object

        Raises:
            ConfigError: If a value has the wrong type or is out of range
        """
        session_data: Dict[str, Any] = ConfigLoader._section_get(data, "session")
        session = SessionConfig(
            tz_offset_minutes=ConfigLoader._int_get(
                session_data, "tz_offset_minutes", DEFAULT_TZ_OFFSET_MINUTES
            ),
            dst_first_day=ConfigLoader._int_get(session_data, "dst_first_day", DEFAULT_DST_FIRST_DAY),
            dst_last_day=ConfigLoader._int_get(session_data, "dst_last_day", DEFAULT_DST_LAST_DAY),
            time_adjust_minutes=session_data.get("time_adjust_minutes"),
            stop_grace_seconds=float(session_data.get("stop_grace_seconds", 5.0)),
        )
        ConfigLoader.sessionConfig_validate(session)

        store_data: Dict[str, Any] = ConfigLoader._section_get(data, "store")
        store = StoreConfig(
            image_suffix=str(store_data.get("image_suffix", ".im")),
            alto_disk_suffix=str(store_data.get("alto_disk_suffix", ".dsk")),
            tajo_disk_suffix=str(store_data.get("tajo_disk_suffix", ".zdisk")),
        )

        display_data: Dict[str, Any] = ConfigLoader._section_get(data, "display")
        display = DisplayConfig(display=display_data.get("display"))

        vm_data: Dict[str, Any] = ConfigLoader._section_get(data, "vm")
        vm = VmConfig(factory=vm_data.get("factory"))

        logging_data: Dict[str, Any] = ConfigLoader._section_get(data, "logging")
        defaults = LoggingConfig()
        logging = LoggingConfig(
            level=logging_data.get("level", defaults.level),
            file=logging_data.get("file"),
            format=logging_data.get("format", defaults.format),
        )

        return Config(
            session=session,
            store=store,
            display=display,
            vm=vm,
            logging=logging,
        )

    @staticmethod
    def sessionConfig_validate(session: SessionConfig) -> None:
        """
        Check session defaults against the clock invariants

        Args:
            session: Parsed session section

        Raises:
            ConfigError: If a value is out of range
        """
        if not TZ_OFFSET_MIN <= session.tz_offset_minutes <= TZ_OFFSET_MAX:
            raise ConfigError(
                f"session.tz_offset_minutes must be in [{TZ_OFFSET_MIN}, {TZ_OFFSET_MAX}], "
                f"got {session.tz_offset_minutes}"
            )
        for name in ("dst_first_day", "dst_last_day"):
            value: int = getattr(session, name)
            if not DAY_OF_YEAR_MIN <= value <= DAY_OF_YEAR_MAX:
                raise ConfigError(
                    f"session.{name} must be in [{DAY_OF_YEAR_MIN}, {DAY_OF_YEAR_MAX}], got {value}"
                )
        if session.time_adjust_minutes is not None and not isinstance(session.time_adjust_minutes, int):
            raise ConfigError("session.time_adjust_minutes must be an integer")
        if session.stop_grace_seconds < 0:
            raise ConfigError("session.stop_grace_seconds must not be negative")

    @staticmethod
    def config_load(file_path: Optional[Path] = None) -> Config:
        """
        Load configuration from file

        Args:
            file_path: Optional path to config file. If None, searches standard
                locations and falls back to built-in defaults.

        Returns:
            Parsed Config object

        Raises:
            FileNotFoundError: If an explicit config file does not exist
            ConfigError: If config file is invalid
        """
        if file_path is None:
            file_path = ConfigLoader.configFile_find()
            if file_path is None:
                return Config()

        data = ConfigLoader.yaml_load(file_path)
        return ConfigLoader.config_parse(data)

    @staticmethod
    def _section_get(data: Dict[str, Any], name: str) -> Dict[str, Any]:
        section = data.get(name) or {}
        if not isinstance(section, dict):
            raise ConfigError(f"Config section '{name}' must be a dictionary")
        return section

    @staticmethod
    def _int_get(section: Dict[str, Any], key: str, default: int) -> int:
        value = section.get(key, default)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"Config value '{key}' must be an integer, got {value!r}")
        return value
