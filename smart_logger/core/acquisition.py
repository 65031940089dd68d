"""
Steady-state polling of temperature and EC registers.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .compensation import coefficient, compensate
from .constants import DEFAULT_REGISTER_MAP, POLL_INTERVAL, RegisterMap
from .errors import ReadError
from .modbus import ModbusLink
from .timing import Clock, RetryPolicy, SystemClock
from ..utils.modbus_tools import FloatCodec

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class Reading:
    """One acquisition cycle's worth of values."""

    timestamp: datetime
    temperature: float
    raw_ec: float
    sensor_ec: float
    smart_ec: float
    k: float
    deviation: float
    hex_temperature: str = ""
    hex_raw_ec: str = ""
    hex_sensor_ec: str = ""

    def as_dict(self) -> Dict[str, Any]:
        """Return the reading as a JSON-friendly dictionary."""
        data = asdict(self)
        data["timestamp"] = self.timestamp.strftime(TIMESTAMP_FORMAT)
        return data


class ReadingSink(ABC):
    """Consumer of readings produced by the acquisition loop."""

    @abstractmethod
    def emit(self, reading: Reading) -> None:
        """Handle one reading."""
        pass

    def close(self) -> None:
        """Release any resources held by the sink."""
        pass


class AcquisitionLoop:
    """Reads temperature, raw EC and sensor EC every poll interval.

    A failed read abandons the cycle: a warning is logged, the loop waits
    one interval and starts again from temperature. With the default retry
    policy this goes on forever.
    """

    def __init__(
        self,
        link: ModbusLink,
        sink: ReadingSink,
        registers: RegisterMap = DEFAULT_REGISTER_MAP,
        clock: Optional[Clock] = None,
        interval: float = POLL_INTERVAL,
        retry: Optional[RetryPolicy] = None
    ):
        """Initialize loop.

        Args:
            link: Bound sensor link
            sink: Destination of each reading
            registers: Register map of the sensor
            clock: Clock used for pacing and timestamps
            interval: Seconds between cycles and between retries
            retry: Attempts allowed per reading (default: unbounded)
        """
        self.link = link
        self.sink = sink
        self.registers = registers
        self.clock = clock or SystemClock()
        self.interval = interval
        self.retry = retry or RetryPolicy()
        self.cycles = 0
        self.failures = 0

    def _read_pair(self, address: int, label: str) -> Tuple[float, List[int]]:
        try:
            words = self.link.read_pair(address)
        except ReadError:
            logger.warning(f"Failed to read {label}")
            raise
        return FloatCodec.decode(words[0], words[1]), words

    def read_once(self) -> Reading:
        """Run the three reads and compute one reading.

        Raises:
            ReadError: If any of the register reads fails
        """
        temp, temp_words = self._read_pair(self.registers.temperature, "temperature")
        raw_ec, raw_words = self._read_pair(self.registers.raw_ec, "raw EC")
        sensor_ec, sensor_words = self._read_pair(self.registers.sensor_ec, "sensor EC")

        smart_ec = compensate(raw_ec, temp)
        return Reading(
            timestamp=self.clock.now(),
            temperature=temp,
            raw_ec=raw_ec,
            sensor_ec=sensor_ec,
            smart_ec=smart_ec,
            k=coefficient(temp),
            deviation=sensor_ec - smart_ec,
            hex_temperature=FloatCodec.to_hex(*temp_words),
            hex_raw_ec=FloatCodec.to_hex(*raw_words),
            hex_sensor_ec=FloatCodec.to_hex(*sensor_words),
        )

    def next_reading(self) -> Reading:
        """Retry :meth:`read_once` until it succeeds or attempts run out.

        Raises:
            ReadError: The last failure, once the retry policy is exhausted
        """
        attempt = 1
        while True:
            try:
                return self.read_once()
            except ReadError:
                self.failures += 1
                if not self.retry.allows(attempt + 1):
                    raise
                attempt += 1
                self.clock.wait(self.interval)

    def run_cycle(self) -> Reading:
        """Produce one reading, hand it to the sink and wait one interval."""
        reading = self.next_reading()
        self.cycles += 1
        self.sink.emit(reading)
        self.clock.wait(self.interval)
        return reading

    def run(self, max_cycles: Optional[int] = None) -> None:
        """Poll until interrupted, or for ``max_cycles`` readings."""
        logger.info(f"Starting acquisition on {self.link.port} every {self.interval}s")
        while max_cycles is None or self.cycles < max_cycles:
            self.run_cycle()
