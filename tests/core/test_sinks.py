"""
Tests for reading sinks.
"""
import csv
import io
import json
import os
import tempfile
import unittest
from datetime import datetime
from unittest.mock import MagicMock

from smart_logger.core.acquisition import Reading
from smart_logger.core.sinks import (CSV_HEADER, ConsoleSink, CsvSink,
                                     MqttSink, MultiSink)


def make_reading(**overrides) -> Reading:
    values = dict(
        timestamp=datetime(2024, 5, 1, 12, 0, 0),
        temperature=25.0,
        raw_ec=12.5,
        sensor_ec=12.0,
        smart_ec=12.5,
        k=0.019,
        deviation=-0.5,
        hex_temperature="41C80000",
        hex_raw_ec="41480000",
        hex_sensor_ec="41400000",
    )
    values.update(overrides)
    return Reading(**values)


class TestCsvSink(unittest.TestCase):
    """Test CsvSink class."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.path = os.path.join(self.tmpdir.name, "ec_data_log.csv")

    def _rows(self):
        with open(self.path, newline="") as f:
            return list(csv.reader(f))

    def test_header_and_row(self):
        sink = CsvSink(self.path)
        sink.emit(make_reading())
        sink.close()

        rows = self._rows()
        self.assertEqual(rows[0], CSV_HEADER)
        self.assertEqual(rows[1], [
            "2024-05-01 12:00:00", "25.0", "41C80000", "12.5",
            "41480000", "12.0", "12.5", "-0.5",
        ])

    def test_append_keeps_single_header(self):
        """Test reopening an existing file does not repeat the header."""
        for _ in range(2):
            sink = CsvSink(self.path)
            sink.emit(make_reading())
            sink.close()

        rows = self._rows()
        self.assertEqual(len(rows), 3)
        self.assertEqual(sum(1 for row in rows if row == CSV_HEADER), 1)

    def test_rows_flushed_immediately(self):
        sink = CsvSink(self.path)
        self.addCleanup(sink.close)
        sink.emit(make_reading())
        self.assertEqual(len(self._rows()), 2)

    def test_close_twice(self):
        sink = CsvSink(self.path)
        sink.close()
        sink.close()


class TestMqttSink(unittest.TestCase):
    """Test MqttSink class."""

    def test_publish_json(self):
        client = MagicMock()
        sink = MqttSink(client, "lab/ec")
        sink.emit(make_reading())

        topic, payload = client.publish.call_args[0]
        self.assertEqual(topic, "lab/ec")
        self.assertEqual(client.publish.call_args[1], {"qos": 1})
        data = json.loads(payload)
        self.assertEqual(data["timestamp"], "2024-05-01 12:00:00")
        self.assertEqual(data["smart_ec"], 12.5)
        self.assertEqual(data["deviation"], -0.5)

    def test_close_disconnects(self):
        client = MagicMock()
        MqttSink(client, "lab/ec").close()
        client.disconnect.assert_called_once()


class TestConsoleSink(unittest.TestCase):
    """Test ConsoleSink class."""

    def test_summary(self):
        stream = io.StringIO()
        sink = ConsoleSink("/dev/ttyUSB0", stream=stream)
        sink.emit(make_reading())
        sink.emit(make_reading(temperature=4.0))

        output = stream.getvalue()
        self.assertIn("Port: /dev/ttyUSB0 | Samples: 2", output)
        self.assertIn("Smart EC", output)
        self.assertIn("[Hex: 41C80000]", output)
        self.assertIn("very cold", output)


class TestMultiSink(unittest.TestCase):
    """Test MultiSink class."""

    def test_fan_out(self):
        first, second = MagicMock(), MagicMock()
        sink = MultiSink([first, second])
        reading = make_reading()
        sink.emit(reading)
        first.emit.assert_called_once_with(reading)
        second.emit.assert_called_once_with(reading)

    def test_close_continues_after_error(self):
        first, second = MagicMock(), MagicMock()
        first.close.side_effect = OSError("disk gone")
        with self.assertLogs('smart_logger.core.sinks', level='ERROR'):
            MultiSink([first, second]).close()
        second.close.assert_called_once()


if __name__ == '__main__':
    unittest.main()
