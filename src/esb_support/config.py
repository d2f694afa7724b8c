"""
Redelivery configuration.

Provides dataclass-based configuration loaded from YAML with environment
variable overrides.
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from core.errors import ConfigurationError

# Default config file location
DEFAULT_CONFIG_PATH = Path("config.yaml")

DEFAULT_CONNECT_MAX_RETRIES = 10
DEFAULT_OTHER_MAX_RETRIES = 2
DEFAULT_RETRY_DELAY_MS = 30000

REDELIVERY_FIELDS = (
    "connect_error_max_retries",
    "other_error_max_retries",
    "retry_delay_ms",
)


def _deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge overlay into base dict."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


@dataclass(frozen=True)
class RedeliveryConfig:
    """Retry ceilings and delay for the consumer redelivery policy.

    Load from environment using RedeliveryConfig.from_env().
    The delay is in milliseconds and is only carried for the host's
    scheduler; the policy never sleeps.
    """

    connect_error_max_retries: int = DEFAULT_CONNECT_MAX_RETRIES
    other_error_max_retries: int = DEFAULT_OTHER_MAX_RETRIES
    retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS

    def __post_init__(self):
        errors = self.validate()
        if errors:
            raise ConfigurationError(
                "; ".join(errors), context={"config": "redelivery"}
            )

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []
        for name in REDELIVERY_FIELDS:
            value = getattr(self, name)
            # bool is an int subclass; reject it explicitly
            if isinstance(value, bool) or not isinstance(value, int):
                errors.append(f"redelivery.{name} must be an integer, got {value!r}")
            elif value < 0:
                errors.append(f"redelivery.{name} must be >= 0, got {value}")
        return errors

    @classmethod
    def from_env(cls) -> "RedeliveryConfig":
        """Load configuration from environment variables.

        Optional environment variables (with defaults):
            REDELIVERY_CONNECT_MAX_RETRIES: 10 (default)
            REDELIVERY_OTHER_MAX_RETRIES: 2 (default)
            REDELIVERY_DELAY_MS: 30000 (default)

        Raises:
            ConfigurationError: If a variable is not a non-negative integer
        """
        return cls.from_dict(
            {
                "connect_error_max_retries": os.getenv(
                    "REDELIVERY_CONNECT_MAX_RETRIES", DEFAULT_CONNECT_MAX_RETRIES
                ),
                "other_error_max_retries": os.getenv(
                    "REDELIVERY_OTHER_MAX_RETRIES", DEFAULT_OTHER_MAX_RETRIES
                ),
                "retry_delay_ms": os.getenv("REDELIVERY_DELAY_MS", DEFAULT_RETRY_DELAY_MS),
            }
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RedeliveryConfig":
        """Build from a dict, coercing YAML/env strings to int."""
        unknown = set(data) - set(REDELIVERY_FIELDS)
        if unknown:
            raise ConfigurationError(
                f"Unknown redelivery settings: {', '.join(sorted(unknown))}"
            )

        values = {}
        for name in REDELIVERY_FIELDS:
            if name not in data:
                continue
            try:
                values[name] = int(data[name])
            except (TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"redelivery.{name} must be an integer, got {data[name]!r}",
                    cause=e,
                ) from e
        return cls(**values)


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    log_dir: str = "logs"
    json_logs: bool = True

    def validate(self) -> List[str]:
        errors = []
        if not isinstance(self.level, str) or self.level.upper() not in LOG_LEVELS:
            errors.append(
                f"logging.level must be one of {', '.join(LOG_LEVELS)}, got {self.level!r}"
            )
        if not isinstance(self.log_dir, str) or not self.log_dir:
            errors.append(f"logging.log_dir must be a non-empty path, got {self.log_dir!r}")
        if not isinstance(self.json_logs, bool):
            errors.append(f"logging.json_logs must be true or false, got {self.json_logs!r}")
        return errors

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        """Build from the logging: section of a config file."""
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise ConfigurationError(
                f"Unknown logging settings: {', '.join(sorted(unknown))}"
            )
        config = cls(**data)
        errors = config.validate()
        if errors:
            raise ConfigurationError("; ".join(errors), context={"config": "logging"})
        return config


@dataclass
class EsbSupportConfig:
    """
    Root configuration.

    Loads from YAML file with environment variable overrides.
    """

    redelivery: RedeliveryConfig = field(default_factory=RedeliveryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    worker_id: str = "worker-01"

    def __post_init__(self):
        self.worker_id = os.getenv("WORKER_ID", self.worker_id)


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(
            f"{name} must be a mapping, got {type(value).__name__}"
        )
    return value


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> EsbSupportConfig:
    """
    Load configuration from YAML file with optional overrides.

    A missing file is not an error; defaults are used instead.

    Args:
        config_path: Path to YAML config file (default: ./config.yaml)
        overrides: Dict of overrides to apply after loading

    Returns:
        EsbSupportConfig instance

    Raises:
        ConfigurationError: If the file is not valid YAML or a value is invalid
    """
    config_path = config_path or DEFAULT_CONFIG_PATH

    data: Any = {}
    if config_path.exists():
        with open(config_path, "r") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Cannot parse {config_path}: {e}",
                    cause=e,
                    context={"config_path": str(config_path)},
                ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"{config_path} must contain a mapping, got {type(data).__name__}"
        )

    if overrides:
        data = _deep_merge(data, overrides)

    return load_config_from_dict(data)


def load_config_from_dict(data: Dict[str, Any]) -> EsbSupportConfig:
    """
    Build configuration from an already parsed dictionary.

    Raises:
        ConfigurationError: On unknown sections or settings, or invalid values
    """
    unknown = set(data) - {f.name for f in fields(EsbSupportConfig)}
    if unknown:
        raise ConfigurationError(f"Unknown config sections: {', '.join(sorted(unknown))}")

    return EsbSupportConfig(
        redelivery=RedeliveryConfig.from_dict(_section(data, "redelivery")),
        logging=LoggingConfig.from_dict(_section(data, "logging")),
        worker_id=str(data.get("worker_id") or "worker-01"),
    )
