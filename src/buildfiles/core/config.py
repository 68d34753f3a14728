"""
Configuration module for buildfiles.

Supports loading from YAML/JSON files with environment variable overrides.
Default values are loaded from defaults.yaml for maintainability.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

# Path to the default configuration file
_DEFAULTS_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

# Cache for default values
_defaults_cache: dict[str, Any] | None = None

WATCH_DRIVERS = ("auto", "native", "polling")


def _load_defaults() -> dict[str, Any]:
    """Load default configuration values from defaults.yaml."""
    global _defaults_cache

    if _defaults_cache is not None:
        return _defaults_cache

    if not _DEFAULTS_CONFIG_PATH.exists():
        logger.warning(f"Defaults config not found: {_DEFAULTS_CONFIG_PATH}")
        _defaults_cache = {}
        return _defaults_cache

    try:
        content = _DEFAULTS_CONFIG_PATH.read_text(encoding="utf-8")
        _defaults_cache = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse defaults config: {e}")
        _defaults_cache = {}

    return _defaults_cache


def _get_default(section: str, key: str, fallback: Any = None) -> Any:
    """Get a default value from the defaults config."""
    defaults = _load_defaults()
    section_defaults = defaults.get(section, {})
    return section_defaults.get(key, fallback)


@dataclass
class MonitorConfig:
    """
    Configuration for the directory monitor and its watch drivers.

    Attributes:
        driver: "auto", "native" or "polling"
        latency: Seconds between polls (polling driver) and between stop
            checks while waiting for events (native driver)
        batch_delay_ms: How long the native driver keeps collecting events
            after the first one before notifying the monitor
        join_timeout: Seconds to wait for the native observer thread to stop
    """

    driver: str = field(default_factory=lambda: _get_default("monitor", "driver", "auto"))
    latency: float = field(default_factory=lambda: _get_default("monitor", "latency", 1.0))
    batch_delay_ms: int = field(
        default_factory=lambda: _get_default("monitor", "batch_delay_ms", 100)
    )
    join_timeout: float = field(
        default_factory=lambda: _get_default("monitor", "join_timeout", 5.0)
    )

    def __post_init__(self) -> None:
        if self.driver not in WATCH_DRIVERS:
            raise ValueError(
                f"Unknown watch driver: {self.driver!r} (expected one of {', '.join(WATCH_DRIVERS)})"
            )


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = field(default_factory=lambda: _get_default("logging", "level", "INFO"))
    format: str = field(
        default_factory=lambda: _get_default(
            "logging", "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    )


@dataclass
class BuildFilesConfig:
    """Main configuration class for buildfiles."""

    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "BuildFilesConfig":
        """
        Load configuration from a YAML or JSON file.

        Args:
            path: Path to the configuration file (.yaml, .yml, or .json)

        Returns:
            BuildFilesConfig instance with loaded values

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValueError: If the file format is unsupported
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        content = path.read_text(encoding="utf-8")

        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content) or {}
        elif path.suffix == ".json":
            data = json.loads(content) if content.strip() else {}
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "BuildFilesConfig":
        """Create BuildFilesConfig from a dictionary."""
        config = cls()

        if "monitor" in data:
            config.monitor = MonitorConfig(**data["monitor"])
        if "logging" in data:
            config.logging = LoggingConfig(**data["logging"])

        return config

    def apply_env_overrides(self) -> "BuildFilesConfig":
        """
        Apply environment variable overrides to the configuration.

        Environment variables follow the pattern: BUILDFILES_<SECTION>_<KEY>
        Examples:
            - BUILDFILES_MONITOR_DRIVER
            - BUILDFILES_MONITOR_LATENCY
            - BUILDFILES_LOGGING_LEVEL

        Returns:
            Self with environment overrides applied
        """
        env_mappings = {
            # Monitor config
            "BUILDFILES_MONITOR_DRIVER": ("monitor", "driver", _parse_driver),
            "BUILDFILES_MONITOR_LATENCY": ("monitor", "latency", float),
            "BUILDFILES_MONITOR_BATCH_DELAY_MS": ("monitor", "batch_delay_ms", int),
            "BUILDFILES_MONITOR_JOIN_TIMEOUT": ("monitor", "join_timeout", float),
            # Logging config
            "BUILDFILES_LOGGING_LEVEL": ("logging", "level", str),
            "BUILDFILES_LOGGING_FORMAT": ("logging", "format", str),
        }

        for env_var, (section, key, converter) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                section_obj = getattr(self, section)
                setattr(section_obj, key, converter(value))

        return self

    def to_dict(self) -> dict:
        """Convert configuration to a dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Serialize configuration to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def to_json(self) -> str:
        """Serialize configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    def save(self, path: Path | str) -> None:
        """
        Save configuration to a file.

        Args:
            path: Path to save the configuration (.yaml, .yml, or .json)

        Raises:
            ValueError: If the file format is unsupported
        """
        path = Path(path)

        if path.suffix in (".yaml", ".yml"):
            content = self.to_yaml()
        elif path.suffix == ".json":
            content = self.to_json()
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def _parse_driver(value: str) -> str:
    """Normalize and validate a watch driver name."""
    driver = value.strip().lower()
    if driver not in WATCH_DRIVERS:
        raise ValueError(f"Unknown watch driver: {value!r}")
    return driver


def load_config(
    config_path: Optional[Path | str] = None, apply_env: bool = True
) -> BuildFilesConfig:
    """
    Load configuration with optional environment variable overrides.

    Args:
        config_path: Optional path to config file. If None, uses defaults.
        apply_env: Whether to apply environment variable overrides.

    Returns:
        BuildFilesConfig instance
    """
    if config_path:
        config = BuildFilesConfig.from_file(config_path)
    else:
        config = BuildFilesConfig()

    if apply_env:
        config.apply_env_overrides()

    return config


def configure_logging(config: LoggingConfig) -> None:
    """Install a root handler using the configured level and format."""
    logging.basicConfig(level=config.level.upper(), format=config.format, force=True)
