"""
Base sensor implementation over named registers.
"""
import logging
from typing import Any, Dict, List, Optional

from .constants import ModbusDataType
from .errors import ReadError
from .modbus import ModbusLink

logger = logging.getLogger(__name__)


class BaseSensor:
    """Base class for all sensors."""

    def __init__(self, config: Dict[str, Any], link: ModbusLink):
        """Initialize sensor.

        Args:
            config: Sensor configuration dictionary containing:
                - name: Sensor name
                - type: Sensor type
                - registers: Dictionary of register configurations, each
                  with ``reg`` (address), ``type`` (ModbusDataType) and
                  optionally ``unit``
            link: Bound ModbusLink for communication
        """
        self.name = config["name"]
        self.type = config["type"]
        self.registers = config["registers"]
        self.link = link

    def read_register(self, name: str) -> Any:
        """Read single register by name.

        FLOAT32 registers always read their full pair.

        Args:
            name: Register name from configuration

        Returns:
            Parsed register value
        """
        if name not in self.registers:
            raise ValueError(f"Unknown register: {name}")

        reg_config = self.registers[name]
        reg_addr = reg_config["reg"]
        reg_type = reg_config.get("type", ModbusDataType.UINT16)

        if reg_type == ModbusDataType.FLOAT32:
            return self.link.read_float(reg_addr)
        return self.link.read_uint16(reg_addr)

    def read_multiple(self, names: List[str]) -> Dict[str, Any]:
        """Read multiple registers by name.

        Args:
            names: List of register names

        Returns:
            Dictionary of register name to value
        """
        result = {}
        for name in names:
            result[name] = self.read_register(name)
        return result

    def read_registers_as_dict(self, names: Optional[List[str]] = None) -> Dict[str, Any]:
        """Read registers, mapping unreadable ones to None.

        Args:
            names: Register names to read (default: all configured)

        Returns:
            Dictionary of register names and values
        """
        result = {}
        for name in names or list(self.registers):
            try:
                result[name] = self.read_register(name)
            except ReadError as e:
                logger.debug(f"Error reading register {name}: {e}")
                result[name] = None
        return result
