"""
Destinations for acquisition readings.
"""
import csv
import json
import logging
import os
import sys
from typing import Iterable, List, Optional, TextIO

from .acquisition import TIMESTAMP_FORMAT, Reading, ReadingSink
from .compensation import temperature_band
from .constants import DEFAULT_MQTT_QOS, Unit
from .mqtt import MqttClient

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "Timestamp",
    "Temperature",
    "Hex_Temp",
    "Raw_EC",
    "Hex_Raw_EC",
    "Sensor_Default_EC",
    "Smart_Calc_EC",
    "Deviation",
]


class CsvSink(ReadingSink):
    """Appends readings to a CSV file.

    The header is only written when the file did not exist before, so
    restarting the logger keeps extending the same table.
    """

    def __init__(self, path: str):
        self.path = path
        file_exists = os.path.exists(path)
        self._file = open(path, "a", newline="")
        self._writer = csv.writer(self._file)
        if not file_exists:
            self._writer.writerow(CSV_HEADER)
            self._file.flush()
        logger.info(f"Logging readings to {path}")

    def emit(self, reading: Reading) -> None:
        self._writer.writerow([
            reading.timestamp.strftime(TIMESTAMP_FORMAT),
            reading.temperature,
            reading.hex_temperature,
            reading.raw_ec,
            reading.hex_raw_ec,
            reading.sensor_ec,
            reading.smart_ec,
            reading.deviation,
        ])
        self._file.flush()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()


class MqttSink(ReadingSink):
    """Publishes each reading as a JSON object."""

    def __init__(self, client: MqttClient, topic: str, qos: int = DEFAULT_MQTT_QOS):
        self.client = client
        self.topic = topic
        self.qos = qos

    def emit(self, reading: Reading) -> None:
        self.client.publish(self.topic, json.dumps(reading.as_dict()), qos=self.qos)

    def close(self) -> None:
        self.client.disconnect()


class ConsoleSink(ReadingSink):
    """Prints a short summary of each reading."""

    def __init__(self, port: str = "", stream: Optional[TextIO] = None):
        self.port = port
        self.stream = stream or sys.stdout
        self.count = 0

    def emit(self, reading: Reading) -> None:
        self.count += 1
        ec = Unit.MS_CM.value
        lines = [
            "",
            f"Port: {self.port} | Samples: {self.count} | "
            f"Time: {reading.timestamp.strftime(TIMESTAMP_FORMAT)}",
            "-" * 56,
            f"{'Temperature':14}: {reading.temperature:10.2f} {Unit.CELSIUS.value}"
            f"  [Hex: {reading.hex_temperature}]  {temperature_band(reading.temperature)}",
            f"{'Raw EC':14}: {reading.raw_ec:10.2f} {ec}  [Hex: {reading.hex_raw_ec}]",
            f"{'Sensor EC':14}: {reading.sensor_ec:10.2f} {ec}",
            f"{'Smart EC':14}: {reading.smart_ec:10.2f} {ec}  (k={reading.k:.4f})",
            f"{'Deviation':14}: {reading.deviation:10.4f} {ec}",
            "-" * 56,
        ]
        print("\n".join(lines), file=self.stream)


class MultiSink(ReadingSink):
    """Hands each reading to several sinks in order."""

    def __init__(self, sinks: Iterable[ReadingSink]):
        self.sinks: List[ReadingSink] = list(sinks)

    def emit(self, reading: Reading) -> None:
        for sink in self.sinks:
            sink.emit(reading)

    def close(self) -> None:
        for sink in self.sinks:
            try:
                sink.close()
            except Exception as e:
                logger.error(f"Error closing {type(sink).__name__}: {e}")
