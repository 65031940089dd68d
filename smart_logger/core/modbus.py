"""
Modbus RTU link to a single EC4A sensor.
"""
import logging
from typing import List, Sequence

from pymodbus.client import ModbusSerialClient
from pymodbus.exceptions import ModbusException
from serial import SerialException

from .config import SerialEndpoint
from .constants import LINK_TIMEOUT, SLAVE_ADDRESS
from .errors import ConnectError, ReadError, WriteError
from ..utils.modbus_tools import FloatCodec

logger = logging.getLogger(__name__)

# Transport failures the client may raise instead of returning an error response
TRANSPORT_ERRORS = (ModbusException, SerialException, OSError)


class ModbusLink:
    """Owns one serial connection to one slave device.

    Every call blocks until the transport answers or the timeout elapses.
    Nothing is retried here; retry policy belongs to the caller.
    """

    def __init__(
        self,
        endpoint: SerialEndpoint,
        slave_address: int = SLAVE_ADDRESS,
        timeout: float = LINK_TIMEOUT,
        client=None
    ):
        """Initialize link without opening the port.

        Args:
            endpoint: Serial port and framing
            slave_address: Modbus slave ID (1-247)
            timeout: Response timeout in seconds
            client: Optional pre-configured ModbusSerialClient instance
        """
        if not 1 <= slave_address <= 247:
            raise ValueError("Slave address must be between 1 and 247")

        self.endpoint = endpoint
        self.slave_address = slave_address
        self.timeout = timeout
        self._connected = False

        if client is not None:
            self.client = client
        else:
            self.client = ModbusSerialClient(
                timeout=timeout,
                retries=0,
                **endpoint.as_dict()
            )

    @classmethod
    def bind(
        cls,
        endpoint: SerialEndpoint,
        slave_address: int = SLAVE_ADDRESS,
        timeout: float = LINK_TIMEOUT,
        client=None
    ) -> "ModbusLink":
        """Create a link and open its transport.

        Raises:
            ConnectError: If the port cannot be opened
        """
        link = cls(endpoint, slave_address, timeout, client=client)
        try:
            link.connect()
        except ConnectError:
            link.close()
            raise
        return link

    @property
    def port(self) -> str:
        return self.endpoint.port

    @property
    def connected(self) -> bool:
        return self._connected

    def connect(self) -> None:
        """Open the serial transport."""
        try:
            opened = self.client.connect()
        except TRANSPORT_ERRORS as e:
            raise ConnectError(self.port, str(e)) from e
        if not opened:
            raise ConnectError(self.port, "port could not be opened")
        self._connected = True
        logger.debug(f"Opened {self.port} (slave {self.slave_address}, timeout {self.timeout}s)")

    def close(self) -> None:
        """Close the serial transport."""
        try:
            self.client.close()
        finally:
            self._connected = False

    def __enter__(self) -> "ModbusLink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def read_registers(self, address: int, count: int) -> List[int]:
        """Read holding registers.

        Args:
            address: Starting register address
            count: Number of registers

        Returns:
            Exactly ``count`` register values

        Raises:
            ReadError: On timeout, error response, short response or
                transport failure
        """
        try:
            response = self.client.read_holding_registers(
                address=address,
                count=count,
                slave=self.slave_address
            )
        except TRANSPORT_ERRORS as e:
            logger.debug(f"Error reading register {address}: {e}")
            raise ReadError(address, str(e)) from e

        if response is None or response.isError():
            logger.debug(f"Error reading register {address}: {response}")
            raise ReadError(address, "error response")

        registers = list(response.registers)
        if len(registers) < count:
            logger.debug(
                f"Error reading register {address}: expected {count} words, got {len(registers)}"
            )
            raise ReadError(address, "short response")
        return registers[:count]

    def write_register(self, address: int, value: int) -> None:
        """Write one register in a single transaction.

        Raises:
            WriteError: On timeout, error response or transport failure
        """
        if not 0 <= value <= 0xFFFF:
            raise ValueError(f"Register value out of range: {value}")
        try:
            response = self.client.write_register(
                address=address,
                value=value,
                slave=self.slave_address
            )
        except TRANSPORT_ERRORS as e:
            logger.error(f"Error writing register {address}: {e}")
            raise WriteError(address, str(e)) from e

        if response is None or response.isError():
            logger.error(f"Error writing register {address}: {response}")
            raise WriteError(address, "error response")

    def write_registers(self, address: int, values: Sequence[int]) -> None:
        """Write consecutive registers in a single transaction.

        Raises:
            WriteError: On timeout, error response or transport failure
        """
        values = list(values)
        if not values:
            raise ValueError("No values to write")
        if any(not 0 <= v <= 0xFFFF for v in values):
            raise ValueError(f"Register value out of range: {values}")
        try:
            response = self.client.write_registers(
                address=address,
                values=values,
                slave=self.slave_address
            )
        except TRANSPORT_ERRORS as e:
            logger.error(f"Error writing registers {address}-{address + len(values) - 1}: {e}")
            raise WriteError(address, str(e)) from e

        if response is None or response.isError():
            logger.error(f"Error writing registers {address}-{address + len(values) - 1}: {response}")
            raise WriteError(address, "error response")

    def read_uint16(self, address: int) -> int:
        """Read a single unsigned register."""
        return self.read_registers(address, 1)[0]

    def read_pair(self, address: int) -> List[int]:
        """Read the two words of a float register pair."""
        return self.read_registers(address, 2)

    def read_float(self, address: int) -> float:
        """Read float value from two consecutive registers."""
        return FloatCodec.decode_registers(self.read_pair(address))

    def write_float(self, address: int, value: float) -> None:
        """Write float value to two consecutive registers as one transaction."""
        self.write_registers(address, FloatCodec.encode(value))
