"""
BOQU IOT-485-EC4A conductivity sensor.
"""
from typing import Any, Dict

from ..core.constants import (DEFAULT_REGISTER_MAP, ModbusDataType,
                              RegisterMap, Unit)
from ..core.modbus import ModbusLink
from ..core.sensor import BaseSensor

DIAGNOSTIC_REGISTERS = [
    "diagnostic_1",
    "diagnostic_2",
    "test_k",
    "calibration_mode",
    "calibration_coeff",
]


def ec4a_sensor_config(registers: RegisterMap = DEFAULT_REGISTER_MAP) -> Dict[str, Any]:
    """Build the named register configuration for a register map."""
    return {
        "name": "ec4a",
        "type": "boqu",
        "registers": {
            "diagnostic_1": {
                "reg": registers.diagnostic_1,
                "type": ModbusDataType.UINT16
            },
            "diagnostic_2": {
                "reg": registers.diagnostic_2,
                "type": ModbusDataType.UINT16
            },
            "calibration_mode": {
                "reg": registers.calibration_mode,
                "type": ModbusDataType.UINT16
            },
            "test_k": {
                "reg": registers.test_k,
                "type": ModbusDataType.UINT16
            },
            "calibration_coeff": {
                "reg": registers.calibration_coeff,
                "type": ModbusDataType.FLOAT32
            },
            "sensor_ec": {
                "reg": registers.sensor_ec,
                "type": ModbusDataType.FLOAT32,
                "unit": Unit.MS_CM
            },
            "raw_ec": {
                "reg": registers.raw_ec,
                "type": ModbusDataType.FLOAT32,
                "unit": Unit.MS_CM
            },
            "temperature": {
                "reg": registers.temperature,
                "type": ModbusDataType.FLOAT32,
                "unit": Unit.CELSIUS
            }
        }
    }


EC4A_SENSOR_CONFIG = ec4a_sensor_config()


class Ec4aSensor(BaseSensor):
    """BOQU IOT-485-EC4A implementation."""

    def __init__(self, link: ModbusLink, registers: RegisterMap = DEFAULT_REGISTER_MAP):
        super().__init__(ec4a_sensor_config(registers), link)

    def get_temperature(self) -> float:
        """Get solution temperature in Celsius."""
        return self.read_register("temperature")

    def get_raw_ec(self) -> float:
        """Get uncompensated EC in mS/cm."""
        return self.read_register("raw_ec")

    def get_sensor_ec(self) -> float:
        """Get the firmware's temperature compensated EC in mS/cm."""
        return self.read_register("sensor_ec")

    def get_calibration_mode(self) -> int:
        return self.read_register("calibration_mode")

    def get_calibration_coeff(self) -> float:
        return self.read_register("calibration_coeff")

    def read_diagnostics(self) -> Dict[str, Any]:
        """Read the diagnostic and calibration registers.

        Returns:
            Mapping of register name to value, None where the read failed
        """
        return self.read_registers_as_dict(DIAGNOSTIC_REGISTERS)
