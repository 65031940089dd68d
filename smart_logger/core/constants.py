"""
Global constants for the BOQU IOT-485-EC4A sensor link.
"""
from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import Final, Tuple

# Serial framing (fixed by the sensor)
DEFAULT_BAUDRATE: Final[int] = 9600
DEFAULT_BYTESIZE: Final[int] = 8
DEFAULT_PARITY: Final[str] = 'N'
DEFAULT_STOPBITS: Final[int] = 1

# CRITICAL: the EC4A ships with slave ID 4, not 1
SLAVE_ADDRESS: Final[int] = 4

# Timing, in seconds
SCAN_TIMEOUT: Final[float] = 0.1
LINK_TIMEOUT: Final[float] = 1.0
POLL_INTERVAL: Final[float] = 1.0
SETTLE_DELAY: Final[float] = 1.0
VERIFY_DELAY: Final[float] = 0.1

# Calibration values
CAL_MODE_1_VALUE: Final[int] = 2
CAL_MODE_2_VALUE: Final[int] = 3
CALIBRATION_COEFF_VALUE: Final[float] = 12880.0
TEST_K_VALUE: Final[int] = 190  # 0.0190 x 10000
FLOAT_TOLERANCE: Final[float] = 0.001

DEFAULT_CSV_PATH: Final[str] = "ec_data_log.csv"
DEFAULT_MQTT_PORT: Final[int] = 1883
DEFAULT_MQTT_QOS: Final[int] = 1
DEFAULT_MQTT_TOPIC: Final[str] = "smart_logger/readings"


class ModbusDataType(Enum):
    """Modbus data type enumeration."""
    UINT16 = auto()
    FLOAT32 = auto()


class CalibrationMode(IntEnum):
    """Calibration procedures understood by the sensor."""
    SKIP = 0
    MODE_1 = 1    # Register 13 = 2
    MODE_2 = 2    # Register 28 = 12880.0, Register 13 = 3
    TEST_K = 3    # Register 16 = 190 (experimental)


class Unit(Enum):
    """Measurement unit enumeration."""
    CELSIUS = "°C"
    MS_CM = "mS/cm"


@dataclass(frozen=True)
class RegisterMap:
    """Holding register addresses of the EC4A.

    Float values occupy the named address and the one after it.
    """
    diagnostic_1: int = 1
    diagnostic_2: int = 2
    calibration_mode: int = 13
    test_k: int = 16
    calibration_coeff: int = 28
    sensor_ec: int = 41
    raw_ec: int = 45
    temperature: int = 60

    @property
    def diagnostics(self) -> Tuple[int, ...]:
        return (self.diagnostic_1, self.diagnostic_2, self.test_k)


DEFAULT_REGISTER_MAP: Final[RegisterMap] = RegisterMap()
