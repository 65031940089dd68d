"""
Core functionality for sensor communication, calibration and acquisition.
"""

from .acquisition import AcquisitionLoop, Reading, ReadingSink
from .calibration import CalibrationEngine, CalibrationReport, build_command
from .compensation import coefficient, compensate
from .config import LoggerConfig, SerialEndpoint, load_config
from .constants import DEFAULT_REGISTER_MAP, CalibrationMode, RegisterMap
from .errors import (CalibrationError, ConfigError, ConnectError,
                     InvalidCalibrationMode, PortNotFound, ReadError,
                     SmartLoggerError, WriteError)
from .modbus import ModbusLink
from .scanner import PortScanner

__all__ = [
    'AcquisitionLoop',
    'Reading',
    'ReadingSink',
    'CalibrationEngine',
    'CalibrationReport',
    'build_command',
    'coefficient',
    'compensate',
    'LoggerConfig',
    'SerialEndpoint',
    'load_config',
    'DEFAULT_REGISTER_MAP',
    'CalibrationMode',
    'RegisterMap',
    'CalibrationError',
    'ConfigError',
    'ConnectError',
    'InvalidCalibrationMode',
    'PortNotFound',
    'ReadError',
    'SmartLoggerError',
    'WriteError',
    'ModbusLink',
    'PortScanner'
]
