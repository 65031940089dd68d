"""
Tests for configuration loading.
"""
import os
import tempfile
import unittest

from smart_logger.core.config import (LoggerConfig, MqttSettings,
                                      SerialEndpoint, load_config,
                                      parse_config)
from smart_logger.core.errors import ConfigError


class TestSerialEndpoint(unittest.TestCase):
    """Test SerialEndpoint class."""

    def test_defaults(self):
        endpoint = SerialEndpoint("/dev/ttyUSB0")
        self.assertEqual(endpoint.as_dict(), {
            "port": "/dev/ttyUSB0",
            "baudrate": 9600,
            "bytesize": 8,
            "parity": "N",
            "stopbits": 1,
        })

    def test_immutable(self):
        endpoint = SerialEndpoint("/dev/ttyUSB0")
        with self.assertRaises(AttributeError):
            endpoint.port = "/dev/ttyUSB1"


class TestParseConfig(unittest.TestCase):
    """Test parse_config function."""

    def test_defaults(self):
        config = parse_config({})
        self.assertEqual(config, LoggerConfig())
        self.assertIsNone(config.port)
        self.assertEqual(config.timeout, 1.0)
        self.assertEqual(config.scan_timeout, 0.1)
        self.assertEqual(config.csv_path, "ec_data_log.csv")

    def test_values(self):
        config = parse_config({
            "port": "/dev/ttyACM0",
            "poll_interval": 2,
            "calibration_mode": 2,
            "max_attempts": 5,
            "mqtt": {"host": "broker.local", "topic": "lab/ec"},
        })
        self.assertEqual(config.port, "/dev/ttyACM0")
        self.assertEqual(config.poll_interval, 2.0)
        self.assertEqual(config.calibration_mode, 2)
        self.assertEqual(config.max_attempts, 5)
        self.assertEqual(config.mqtt, MqttSettings(host="broker.local", topic="lab/ec"))

    def test_unknown_key(self):
        with self.assertRaises(ConfigError):
            parse_config({"slave_address": 1})

    def test_wrong_types(self):
        for data in (
            {"timeout": "fast"},
            {"timeout": True},
            {"poll_interval": -1},
            {"max_attempts": 0},
            {"calibration_mode": "2"},
            {"mqtt": "broker"},
            {"mqtt": {"port": 1883}},
            {"mqtt": {"host": "b", "qos": 2}},
        ):
            with self.subTest(data=data):
                with self.assertRaises(ConfigError):
                    parse_config(data)

    def test_not_a_mapping(self):
        with self.assertRaises(ConfigError):
            parse_config(["port"])

    def test_override(self):
        config = LoggerConfig().override(port="/dev/ttyUSB1", csv_path=None)
        self.assertEqual(config.port, "/dev/ttyUSB1")
        self.assertEqual(config.csv_path, "ec_data_log.csv")


class TestLoadConfig(unittest.TestCase):
    """Test load_config function."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def _write(self, text: str) -> str:
        path = os.path.join(self.tmpdir.name, "logger.yaml")
        with open(path, "w") as f:
            f.write(text)
        return path

    def test_no_path(self):
        self.assertEqual(load_config(None), LoggerConfig())

    def test_yaml_file(self):
        path = self._write("port: /dev/ttyUSB2\npoll_interval: 0.5\ncsv_path: out.csv\n")
        config = load_config(path)
        self.assertEqual(config.port, "/dev/ttyUSB2")
        self.assertEqual(config.poll_interval, 0.5)
        self.assertEqual(config.csv_path, "out.csv")

    def test_empty_file(self):
        path = self._write("")
        with self.assertLogs('smart_logger.core.config', level='WARNING'):
            self.assertEqual(load_config(path), LoggerConfig())

    def test_missing_file(self):
        with self.assertRaises(ConfigError):
            load_config(os.path.join(self.tmpdir.name, "missing.yaml"))

    def test_invalid_yaml(self):
        path = self._write("port: [unclosed\n")
        with self.assertRaises(ConfigError):
            load_config(path)


if __name__ == '__main__':
    unittest.main()
