"""
Tests for serial port discovery.
"""
import unittest
from unittest.mock import MagicMock

from smart_logger.core.errors import ConnectError, PortNotFound, ReadError
from smart_logger.core.scanner import PortScanner, default_candidates


class FakeBus:
    """Link factory where only some ports answer."""

    def __init__(self, responders=(), unopenable=()):
        self.responders = set(responders)
        self.unopenable = set(unopenable)
        self.probed = []
        self.links = {}

    def __call__(self, endpoint, slave_address, timeout):
        self.probed.append(endpoint.port)
        if endpoint.port in self.unopenable:
            raise ConnectError(endpoint.port)
        link = MagicMock()
        link.port = endpoint.port
        if endpoint.port in self.responders:
            link.read_pair.return_value = [0x41C8, 0x0000]
        else:
            link.read_pair.side_effect = ReadError(60)
        self.links[endpoint.port] = link
        return link


class TestDefaultCandidates(unittest.TestCase):
    """Test the candidate list."""

    def test_order(self):
        ports = default_candidates()
        self.assertEqual(len(ports), 31)
        self.assertEqual(ports[0], "/dev/ttyS0")
        self.assertEqual(ports[20], "/dev/ttyS20")
        self.assertEqual(ports[21:26], [f"/dev/ttyUSB{i}" for i in range(5)])
        self.assertEqual(ports[26:], [f"/dev/ttyACM{i}" for i in range(5)])


class TestPortScanner(unittest.TestCase):
    """Test PortScanner class."""

    def test_first_responder_wins(self):
        """Test a responder at the 3rd candidate stops the scan there."""
        candidates = ["/dev/ttyS0", "/dev/ttyS1", "/dev/ttyS2", "/dev/ttyS3", "/dev/ttyUSB0"]
        bus = FakeBus(responders=["/dev/ttyS2", "/dev/ttyUSB0"])
        scanner = PortScanner(candidates=candidates, link_factory=bus)

        endpoint = scanner.discover()
        self.assertEqual(endpoint.port, "/dev/ttyS2")
        self.assertEqual(bus.probed, candidates[:3])

    def test_handshake_reads_temperature(self):
        bus = FakeBus(responders=["/dev/ttyUSB0"])
        scanner = PortScanner(candidates=["/dev/ttyUSB0"], link_factory=bus)
        scanner.discover()
        bus.links["/dev/ttyUSB0"].read_pair.assert_called_once_with(60)

    def test_probe_settings(self):
        """Test probes use slave 4 and the short timeout."""
        calls = []

        def factory(endpoint, slave_address, timeout):
            calls.append((endpoint.port, endpoint.baudrate, slave_address, timeout))
            raise ConnectError(endpoint.port)

        PortScanner(candidates=["/dev/ttyS0"], link_factory=factory).discover()
        self.assertEqual(calls, [("/dev/ttyS0", 9600, 4, 0.1)])

    def test_failed_probes_are_closed(self):
        """Test every opened link is closed, responders included."""
        bus = FakeBus(responders=["/dev/ttyS1"])
        PortScanner(candidates=["/dev/ttyS0", "/dev/ttyS1"], link_factory=bus).discover()
        for link in bus.links.values():
            link.close.assert_called_once()

    def test_unopenable_ports_are_skipped(self):
        bus = FakeBus(responders=["/dev/ttyS1"], unopenable=["/dev/ttyS0"])
        scanner = PortScanner(candidates=["/dev/ttyS0", "/dev/ttyS1"], link_factory=bus)
        self.assertEqual(scanner.discover().port, "/dev/ttyS1")

    def test_nothing_found(self):
        bus = FakeBus()
        scanner = PortScanner(candidates=["/dev/ttyS0", "/dev/ttyUSB0"], link_factory=bus)
        self.assertIsNone(scanner.discover())
        self.assertEqual(bus.probed, ["/dev/ttyS0", "/dev/ttyUSB0"])

    def test_require_raises(self):
        scanner = PortScanner(candidates=["/dev/ttyS0"], link_factory=FakeBus())
        with self.assertRaises(PortNotFound):
            scanner.require()


if __name__ == '__main__':
    unittest.main()
