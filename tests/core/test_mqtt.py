"""
Tests for the MQTT client wrapper.
"""
import unittest
from unittest.mock import MagicMock

import paho.mqtt.client as mqtt

from smart_logger.core.mqtt import MqttClient


class TestMqttClient(unittest.TestCase):
    """Test MqttClient class."""

    def setUp(self):
        """Set up test fixtures."""
        self.paho = MagicMock()
        self.client = MqttClient(
            client_id="test",
            host="broker.local",
            username="user",
            password="secret",
            client=self.paho
        )

    def test_credentials(self):
        self.paho.username_pw_set.assert_called_once_with("user", "secret")

    def test_connect(self):
        """Test connection starts the network loop."""
        self.client.connect()
        self.paho.connect.assert_called_once_with("broker.local", 1883, 60)
        self.paho.loop_start.assert_called_once()

    def test_connect_failure(self):
        self.paho.connect.side_effect = ConnectionRefusedError("refused")
        with self.assertRaises(ConnectionRefusedError):
            self.client.connect()

    def test_publish(self):
        self.paho.publish.return_value = MagicMock(rc=mqtt.MQTT_ERR_SUCCESS)
        self.client.publish("lab/ec", "{}")
        self.paho.publish.assert_called_once_with("lab/ec", "{}", 1)

    def test_publish_without_connection_is_logged(self):
        """Test a rejected publish leaves a log line."""
        self.paho.publish.return_value = MagicMock(rc=mqtt.MQTT_ERR_NO_CONN)
        with self.assertLogs('smart_logger.core.mqtt', level='ERROR') as logs:
            self.client.publish("lab/ec", "{}")
        self.assertIn("lab/ec", logs.output[0])

    def test_publish_failure_is_logged(self):
        """Test a broker error does not propagate."""
        self.paho.publish.side_effect = RuntimeError("not connected")
        with self.assertLogs('smart_logger.core.mqtt', level='ERROR'):
            self.client.publish("lab/ec", "{}")

    def test_disconnect(self):
        self.client.disconnect()
        self.paho.loop_stop.assert_called_once()
        self.paho.disconnect.assert_called_once()

    def test_connect_callback(self):
        failed = MagicMock(is_failure=True)
        with self.assertLogs('smart_logger.core.mqtt', level='ERROR'):
            self.client._on_connect(self.paho, None, None, failed)


if __name__ == '__main__':
    unittest.main()
