"""
Exception hierarchy for sensor discovery, register access and calibration.
"""
from typing import Any, Optional


class SmartLoggerError(Exception):
    """Base class for all logger errors."""


class ConfigError(SmartLoggerError, ValueError):
    """Raised when a configuration file cannot be used."""


class PortNotFound(SmartLoggerError):
    """No candidate port answered the handshake."""

    def __init__(self, message: str = "Sensor not found on any candidate port"):
        super().__init__(message)


class ConnectError(SmartLoggerError):
    """The transport could not be opened on a port."""

    def __init__(self, port: str, reason: Optional[str] = None):
        self.port = port
        message = f"Failed to connect to {port}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class LinkError(SmartLoggerError):
    """A wire-level register operation failed."""

    operation = "access"

    def __init__(self, address: int, reason: Optional[str] = None):
        self.address = address
        message = f"Failed to {self.operation} register {address}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ReadError(LinkError):
    operation = "read"


class WriteError(LinkError):
    operation = "write"


class CalibrationError(SmartLoggerError):
    """A calibration write failed and the sequence was aborted."""

    def __init__(self, address: int, cause: Optional[Exception] = None):
        self.address = address
        self.cause = cause
        super().__init__(f"Calibration aborted at register {address}")


class InvalidCalibrationMode(SmartLoggerError, ValueError):
    """A calibration mode outside 0-3 was requested."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Invalid calibration mode: {value!r}")
