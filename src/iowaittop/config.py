"""Configuration system for iowaittop."""

import math
from dataclasses import dataclass, field, fields
from pathlib import Path

import tomlkit

from iowaittop.errors import ConfigError
from iowaittop.logging import LEVELS


@dataclass
class MonitorConfig:
    """Sampling and display configuration."""

    interval: float = 1.0  # Seconds between the end of one frame and the next scan
    count: int = 5  # Rows shown per frame
    proc_root: str = "/proc"


@dataclass
class LoggingConfig:
    """Diagnostic logging configuration (stderr)."""

    level: str = "WARNING"


def _dataclass_to_table(obj: object) -> tomlkit.items.Table:
    """Convert a flat dataclass instance to a tomlkit Table."""
    table = tomlkit.table()
    for f in fields(obj):  # type: ignore[arg-type]
        table.add(f.name, getattr(obj, f.name))
    return table


@dataclass
class Config:
    """Main configuration container."""

    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def config_dir(self) -> Path:
        """Configuration directory."""
        return Path.home() / ".config" / "iowaittop"

    @property
    def config_path(self) -> Path:
        """Path to config file."""
        return self.config_dir / "config.toml"

    def validate(self) -> None:
        """Raise ConfigError if any value is out of range."""
        if not (math.isfinite(self.monitor.interval) and self.monitor.interval > 0):
            raise ConfigError(
                f"monitor.interval must be a positive finite number, got {self.monitor.interval}"
            )
        if self.monitor.count < 1:
            raise ConfigError(f"monitor.count must be at least 1, got {self.monitor.count}")
        if not self.monitor.proc_root:
            raise ConfigError("monitor.proc_root must not be empty")
        if self.logging.level.upper() not in LEVELS:
            raise ConfigError(
                f"Unknown logging.level: {self.logging.level!r}. Valid levels: {list(LEVELS)}"
            )

    def save(self, path: Path | None = None) -> None:
        """Save config to TOML file."""
        path = path or self.config_path
        path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        for name in ("monitor", "logging"):
            doc.add(name, _dataclass_to_table(getattr(self, name)))
            doc.add(tomlkit.nl())

        path.write_text(tomlkit.dumps(doc))

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML file, returning defaults for missing values.

        Raises:
            ConfigError: If the file cannot be parsed or holds invalid values.
        """
        defaults = cls()
        path = path or defaults.config_path
        if not path.exists():
            return defaults

        try:
            with open(path) as f:
                data = tomlkit.load(f).unwrap()
        except tomlkit.exceptions.TOMLKitError as e:
            raise ConfigError(f"Failed to parse config file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read config file {path}: {e}") from e

        monitor_data = _section(data, "monitor", path)
        logging_data = _section(data, "logging", path)
        mon_defaults = defaults.monitor

        config = cls(
            monitor=MonitorConfig(
                interval=_number(monitor_data, "monitor.interval", mon_defaults.interval, path),
                count=_integer(monitor_data, "monitor.count", mon_defaults.count, path),
                proc_root=_string(monitor_data, "monitor.proc_root", mon_defaults.proc_root, path),
            ),
            logging=LoggingConfig(
                level=_string(logging_data, "logging.level", defaults.logging.level, path),
            ),
        )

        config.validate()
        return config


def _section(data: dict, name: str, path: Path) -> dict:
    """Return a top-level table, or an empty one when it is absent."""
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] in config file {path} must be a table")
    return section


def _value(section: dict, key: str, default):
    return section.get(key.rsplit(".", 1)[-1], default)


def _number(section: dict, key: str, default: float, path: Path) -> float:
    value = _value(section, key, default)
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{key} in config file {path} must be a number, got {value!r}")
    return float(value)


def _integer(section: dict, key: str, default: int, path: Path) -> int:
    value = _value(section, key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{key} in config file {path} must be an integer, got {value!r}")
    return value


def _string(section: dict, key: str, default: str, path: Path) -> str:
    value = _value(section, key, default)
    if not isinstance(value, str):
        raise ConfigError(f"{key} in config file {path} must be a string, got {value!r}")
    return value
