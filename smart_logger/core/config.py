"""
Serial endpoint and logger configuration.
"""
import logging
import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional

import yaml

from .constants import (DEFAULT_BAUDRATE, DEFAULT_BYTESIZE, DEFAULT_CSV_PATH,
                        DEFAULT_MQTT_PORT, DEFAULT_MQTT_TOPIC, DEFAULT_PARITY,
                        DEFAULT_STOPBITS, FLOAT_TOLERANCE, LINK_TIMEOUT,
                        POLL_INTERVAL, SCAN_TIMEOUT, SETTLE_DELAY, VERIFY_DELAY)
from .errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SerialEndpoint:
    """Serial parameters of one candidate port."""

    port: str
    baudrate: int = DEFAULT_BAUDRATE
    bytesize: int = DEFAULT_BYTESIZE
    parity: str = DEFAULT_PARITY
    stopbits: int = DEFAULT_STOPBITS

    def as_dict(self) -> Dict[str, Any]:
        """Return a mapping compatible with :mod:`pymodbus` client arguments."""
        return {
            "port": self.port,
            "baudrate": self.baudrate,
            "bytesize": self.bytesize,
            "parity": self.parity,
            "stopbits": self.stopbits,
        }


@dataclass(frozen=True)
class MqttSettings:
    """Broker settings for publishing readings."""

    host: str
    port: int = DEFAULT_MQTT_PORT
    topic: str = DEFAULT_MQTT_TOPIC
    client_id: str = "smart-ec-logger"
    username: Optional[str] = None
    password: Optional[str] = None


@dataclass(frozen=True)
class LoggerConfig:
    """Runtime settings of the logger application.

    Slave address and serial framing are not part of this; they are fixed
    for the sensor.
    """

    port: Optional[str] = None
    scan_timeout: float = SCAN_TIMEOUT
    timeout: float = LINK_TIMEOUT
    poll_interval: float = POLL_INTERVAL
    settle_delay: float = SETTLE_DELAY
    verify_delay: float = VERIFY_DELAY
    float_tolerance: float = FLOAT_TOLERANCE
    csv_path: Optional[str] = DEFAULT_CSV_PATH
    calibration_mode: Optional[int] = None
    max_attempts: Optional[int] = None
    mqtt: Optional[MqttSettings] = field(default=None)

    def override(self, **changes: Any) -> "LoggerConfig":
        """Return a copy with the given non-None values replaced."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


_FLOAT_KEYS = ("scan_timeout", "timeout", "poll_interval", "settle_delay",
               "verify_delay", "float_tolerance")
_OPTIONAL_INT_KEYS = ("calibration_mode", "max_attempts")
_OPTIONAL_STR_KEYS = ("port", "csv_path")


def _parse_mqtt(data: Any) -> MqttSettings:
    if not isinstance(data, dict):
        raise ConfigError("'mqtt' must be a mapping")
    known = {f.name for f in fields(MqttSettings)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown mqtt keys: {', '.join(sorted(unknown))}")
    if "host" not in data:
        raise ConfigError("'mqtt.host' is required")
    try:
        return MqttSettings(
            host=str(data["host"]),
            port=int(data.get("port", DEFAULT_MQTT_PORT)),
            topic=str(data.get("topic", DEFAULT_MQTT_TOPIC)),
            client_id=str(data.get("client_id", "smart-ec-logger")),
            username=data.get("username"),
            password=data.get("password"),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid mqtt settings: {e}") from e


def parse_config(data: Dict[str, Any]) -> LoggerConfig:
    """Build a LoggerConfig from a mapping.

    Args:
        data: Parsed configuration document

    Returns:
        Validated configuration

    Raises:
        ConfigError: On unknown keys or values of the wrong type
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    known = {f.name for f in fields(LoggerConfig)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    values: Dict[str, Any] = {}
    for key, value in data.items():
        if value is None:
            continue
        if key in _FLOAT_KEYS:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"'{key}' must be a number")
            if value < 0:
                raise ConfigError(f"'{key}' must not be negative")
            values[key] = float(value)
        elif key in _OPTIONAL_INT_KEYS:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"'{key}' must be an integer")
            values[key] = value
        elif key in _OPTIONAL_STR_KEYS:
            values[key] = str(value)
        elif key == "mqtt":
            values[key] = _parse_mqtt(value)

    if values.get("max_attempts") is not None and values["max_attempts"] < 1:
        raise ConfigError("'max_attempts' must be at least 1")
    return LoggerConfig(**values)


def load_config(path: Optional[str]) -> LoggerConfig:
    """Load configuration from a YAML file.

    Args:
        path: YAML file path, or None for defaults

    Returns:
        Configuration with file values applied over the defaults
    """
    if path is None:
        return LoggerConfig()
    if not os.path.exists(path):
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        logger.warning(f"Config file {path} is empty, using defaults")
        return LoggerConfig()
    config = parse_config(data)
    logger.debug(f"Loaded configuration from {path}")
    return config
