"""
Serial port discovery for the EC4A sensor.
"""
import logging
from typing import Callable, List, Optional, Sequence

from .config import SerialEndpoint
from .constants import DEFAULT_REGISTER_MAP, RegisterMap, SCAN_TIMEOUT, SLAVE_ADDRESS
from .errors import ConnectError, PortNotFound, ReadError
from .modbus import ModbusLink

logger = logging.getLogger(__name__)

LinkFactory = Callable[[SerialEndpoint, int, float], ModbusLink]


def default_candidates() -> List[str]:
    """Return candidate device paths in probe order.

    Legacy/virtualized serial ports first, then USB-serial adapters, then
    CDC-ACM devices.
    """
    ports = [f"/dev/ttyS{i}" for i in range(21)]
    ports.extend(f"/dev/ttyUSB{i}" for i in range(5))
    ports.extend(f"/dev/ttyACM{i}" for i in range(5))
    return ports


def _bind(endpoint: SerialEndpoint, slave_address: int, timeout: float) -> ModbusLink:
    return ModbusLink.bind(endpoint, slave_address, timeout)


class PortScanner:
    """Finds the first port where the sensor answers a handshake read."""

    def __init__(
        self,
        candidates: Optional[Sequence[str]] = None,
        slave_address: int = SLAVE_ADDRESS,
        timeout: float = SCAN_TIMEOUT,
        registers: RegisterMap = DEFAULT_REGISTER_MAP,
        link_factory: LinkFactory = _bind
    ):
        """Initialize scanner.

        Args:
            candidates: Device paths to try, in order (default: see
                :func:`default_candidates`)
            slave_address: Slave ID the sensor answers to
            timeout: Per-probe response timeout in seconds
            registers: Register map; the temperature pair is the handshake
            link_factory: Callable opening a link, for tests
        """
        self.candidates = list(candidates) if candidates is not None else default_candidates()
        self.slave_address = slave_address
        self.timeout = timeout
        self.registers = registers
        self._link_factory = link_factory

    def probe(self, port: str) -> bool:
        """Bind to a port and try the handshake read once."""
        endpoint = SerialEndpoint(port)
        try:
            link = self._link_factory(endpoint, self.slave_address, self.timeout)
        except ConnectError as e:
            logger.debug(f"Skipping {port}: {e}")
            return False

        try:
            link.read_pair(self.registers.temperature)
            return True
        except ReadError as e:
            logger.debug(f"No answer on {port}: {e}")
            return False
        finally:
            link.close()

    def discover(self) -> Optional[SerialEndpoint]:
        """Probe candidates in order and return the first responder.

        Returns:
            Endpoint of the responsive port, or None if every candidate failed
        """
        logger.info(
            f"Scanning {len(self.candidates)} ports for BOQU IOT-485-EC4A "
            f"(slave ID {self.slave_address})"
        )
        for port in self.candidates:
            if self.probe(port):
                logger.info(f"Found sensor at {port}")
                return SerialEndpoint(port)
        logger.warning("Sensor not found on any candidate port")
        return None

    def require(self) -> SerialEndpoint:
        """Like :meth:`discover` but raise PortNotFound on failure."""
        endpoint = self.discover()
        if endpoint is None:
            raise PortNotFound()
        return endpoint
