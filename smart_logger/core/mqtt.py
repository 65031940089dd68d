"""
MQTT client for publishing sensor readings.
"""
import logging
from typing import Any, Optional

import paho.mqtt.client as mqtt

from .constants import DEFAULT_MQTT_PORT, DEFAULT_MQTT_QOS

logger = logging.getLogger(__name__)


class MqttClient:
    """MQTT client wrapper."""

    def __init__(
        self,
        client_id: str,
        host: str = "localhost",
        port: int = DEFAULT_MQTT_PORT,
        username: Optional[str] = None,
        password: Optional[str] = None,
        keepalive: int = 60,
        client=None
    ):
        """Initialize MQTT client.

        Args:
            client_id: Client identifier
            host: MQTT broker host
            port: MQTT broker port
            username: MQTT username
            password: MQTT password
            keepalive: Keepalive timeout in seconds
            client: Optional pre-configured paho client
        """
        if client is not None:
            self.client = client
        else:
            self.client = mqtt.Client(
                mqtt.CallbackAPIVersion.VERSION2,
                client_id=client_id,
                protocol=mqtt.MQTTv5
            )

        if username:
            self.client.username_pw_set(username, password)

        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect

        self.host = host
        self.port = port
        self.keepalive = keepalive

    def connect(self) -> None:
        """Connect to MQTT broker."""
        try:
            self.client.connect(
                self.host,
                self.port,
                self.keepalive
            )
            self.client.loop_start()
            logger.info(
                f"Connected to MQTT broker at {self.host}:{self.port}"
            )
        except Exception as e:
            logger.error(f"Failed to connect to MQTT broker: {e}")
            raise

    def disconnect(self) -> None:
        """Disconnect from MQTT broker."""
        try:
            self.client.loop_stop()
            self.client.disconnect()
            logger.info("Disconnected from MQTT broker")
        except Exception as e:
            logger.error(f"Error disconnecting from MQTT broker: {e}")

    def publish(
        self,
        topic: str,
        payload: Any,
        qos: int = DEFAULT_MQTT_QOS
    ) -> None:
        """Publish message to topic.

        Publishing failures are logged and dropped so a broker outage does
        not stop acquisition.

        Args:
            topic: Topic to publish to
            payload: Message payload
            qos: Quality of service level
        """
        try:
            info = self.client.publish(topic, payload, qos)
        except Exception as e:
            logger.error(f"Failed to publish to {topic}: {e}")
            return

        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            logger.error(f"Failed to publish to {topic}: {mqtt.error_string(info.rc)}")
        else:
            logger.debug(f"Published to {topic}")

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code.is_failure:
            logger.error(f"MQTT connection failed: {reason_code}")
        else:
            logger.info("MQTT connection established")

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code.is_failure:
            logger.warning(f"Unexpected MQTT disconnection: {reason_code}")
