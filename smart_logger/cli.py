"""
Command line entry point for the EC4A smart logger.
"""
import argparse
import logging
import sys
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, TextIO

from .core.acquisition import AcquisitionLoop, ReadingSink
from .core.calibration import CalibrationEngine, select_mode
from .core.config import LoggerConfig, MqttSettings, SerialEndpoint, load_config
from .core.constants import (DEFAULT_MQTT_PORT, DEFAULT_MQTT_TOPIC,
                             DEFAULT_REGISTER_MAP, SLAVE_ADDRESS,
                             CalibrationMode)
from .core.errors import (CalibrationError, ConfigError, ConnectError,
                          PortNotFound, ReadError)
from .core.modbus import ModbusLink
from .core.mqtt import MqttClient
from .core.scanner import PortScanner
from .core.sinks import ConsoleSink, CsvSink, MqttSink, MultiSink
from .core.timing import Clock, RetryPolicy, SystemClock
from .plugins.boqu import Ec4aSensor
from .utils.modbus_tools import FloatCodec, ModbusTools
from .utils.terminal import PosixTerminal, TerminalController

logger = logging.getLogger(__name__)

MODE_MENU = """
SELECT CALIBRATION MODE
  [0] Skip calibration (use existing sensor settings)
  [1] Mode 1: Write Register 13 = 2 (integer)
  [2] Mode 2: Write Register 28 = 12880.0 (float) + Register 13 = 3
  [3] Mode 3: TEST - Write K=190 to Register 16 (K x 10000 format)
"""

STOP_KEYS = ("\n", "\r", " ")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smart-ec-logger",
        description="Log temperature compensated EC from a BOQU IOT-485-EC4A sensor.",
    )
    parser.add_argument(
        "--mode",
        help="Calibration mode: 0 skip, 1 register 13 = 2, "
             "2 register 28 = 12880 + register 13 = 3, 3 test K=190 on register 16",
    )
    parser.add_argument("--port", help="Serial port to use instead of scanning")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--csv", help="CSV file readings are appended to")
    parser.add_argument("--no-csv", action="store_true", help="Do not write a CSV file")
    parser.add_argument("--mqtt-host", help="Publish readings to this MQTT broker")
    parser.add_argument("--mqtt-port", type=int, default=DEFAULT_MQTT_PORT, help="MQTT broker port")
    parser.add_argument("--mqtt-topic", default=DEFAULT_MQTT_TOPIC, help="MQTT topic for readings")
    parser.add_argument(
        "--diagnostics",
        action="store_true",
        help="Show live diagnostic registers before calibration",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Verbosity of the runtime logger",
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def resolve_config(args: argparse.Namespace) -> LoggerConfig:
    """Apply command line flags over the configuration file."""
    config = load_config(args.config).override(port=args.port, csv_path=args.csv)
    if args.no_csv:
        config = replace(config, csv_path=None)
    if args.mqtt_host:
        config = replace(config, mqtt=MqttSettings(
            host=args.mqtt_host,
            port=args.mqtt_port,
            topic=args.mqtt_topic,
        ))
    return config


def prompt_mode(
    input_func: Callable[[str], str] = input,
    stream: Optional[TextIO] = None
) -> CalibrationMode:
    """Ask the operator for a calibration mode.

    Anything other than 0-3 selects mode 0.
    """
    print(MODE_MENU, file=stream or sys.stdout)
    try:
        choice = input_func("  Enter mode (0/1/2/3): ")
    except EOFError:
        choice = ""
    return select_mode(choice)


def resolve_mode(
    args: argparse.Namespace,
    config: LoggerConfig,
    input_func: Callable[[str], str] = input
) -> CalibrationMode:
    if args.mode is not None:
        return select_mode(args.mode)
    if config.calibration_mode is not None:
        return select_mode(config.calibration_mode)
    return prompt_mode(input_func)


def format_diagnostics(values: Dict[str, Any]) -> List[str]:
    """Render a diagnostic snapshot as display lines."""
    lines = []
    for name, value in values.items():
        if value is None:
            shown = "[READ ERROR]"
        elif isinstance(value, float):
            shown = f"{value:.3f}  (Hex: {FloatCodec.to_hex(*FloatCodec.encode(value))})"
        else:
            shown = f"{value:5d}  ({ModbusTools.format_register(value)})"
        lines.append(f"  {name:18} = {shown}")
    return lines


def monitor_diagnostics(
    sensor: Ec4aSensor,
    terminal: TerminalController,
    clock: Clock,
    interval: float,
    stream: Optional[TextIO] = None,
    max_updates: Optional[int] = None
) -> int:
    """Refresh the diagnostic registers until Enter or Space is pressed.

    Without an interactive terminal a single snapshot is shown.

    Returns:
        Number of snapshots shown
    """
    stream = stream or sys.stdout
    updates = 0
    with terminal:
        while max_updates is None or updates < max_updates:
            updates += 1
            terminal.clear()
            print("SENSOR DIAGNOSTIC REGISTERS (REAL-TIME)", file=stream)
            print(f"  Time: {clock.now():%Y-%m-%d %H:%M:%S}  |  Updates: {updates}\n", file=stream)
            print("\n".join(format_diagnostics(sensor.read_diagnostics())), file=stream)
            print("\n  >>> Press ENTER to proceed to calibration mode selection <<<", file=stream)
            stream.flush()
            if not terminal.interactive or terminal.key_pressed() in STOP_KEYS:
                break
            clock.wait(interval)
    logger.info("Diagnostic monitoring stopped")
    return updates


def build_sink(config: LoggerConfig, port: str) -> ReadingSink:
    sinks: List[ReadingSink] = [ConsoleSink(port)]
    if config.csv_path:
        sinks.append(CsvSink(config.csv_path))
    if config.mqtt is not None:
        client = MqttClient(
            client_id=config.mqtt.client_id,
            host=config.mqtt.host,
            port=config.mqtt.port,
            username=config.mqtt.username,
            password=config.mqtt.password,
        )
        try:
            client.connect()
        except Exception as e:
            logger.error(f"MQTT publishing disabled: {e}")
        else:
            sinks.append(MqttSink(client, config.mqtt.topic))
    return MultiSink(sinks)


def open_link(config: LoggerConfig) -> ModbusLink:
    """Find the sensor and bind the primary link.

    Raises:
        PortNotFound: If no candidate port answered
        ConnectError: If the chosen port cannot be opened
    """
    if config.port:
        endpoint = SerialEndpoint(config.port)
    else:
        endpoint = PortScanner(timeout=config.scan_timeout).require()
    link = ModbusLink.bind(endpoint, SLAVE_ADDRESS, config.timeout)
    logger.info(f"Connected to sensor on {endpoint.port}")
    return link


def main(
    argv: Optional[List[str]] = None,
    clock: Optional[Clock] = None,
    input_func: Callable[[str], str] = input
) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    clock = clock or SystemClock()

    try:
        config = resolve_config(args)
    except ConfigError as e:
        logger.error(str(e))
        return 1

    try:
        link = open_link(config)
    except PortNotFound as e:
        logger.error(f"{e}. Check: USB connection, Slave ID (must be 4), Baud Rate (9600)")
        return 1
    except ConnectError as e:
        logger.error(str(e))
        return 1

    sink: Optional[ReadingSink] = None
    try:
        if args.diagnostics:
            monitor_diagnostics(Ec4aSensor(link), PosixTerminal(), clock, config.poll_interval)

        mode = resolve_mode(args, config, input_func)
        engine = CalibrationEngine(
            registers=DEFAULT_REGISTER_MAP,
            clock=clock,
            settle_delay=config.settle_delay,
            verify_delay=config.verify_delay,
            tolerance=config.float_tolerance,
        )
        try:
            report = engine.execute(link, mode)
            if report.mismatches:
                logger.warning(f"{len(report.mismatches)} calibration write(s) did not read back as written")
        except CalibrationError as e:
            logger.warning(f"{e}. Continuing with sensor defaults")
        clock.wait(config.settle_delay)

        sink = build_sink(config, link.port)
        loop = AcquisitionLoop(
            link,
            sink,
            registers=DEFAULT_REGISTER_MAP,
            clock=clock,
            interval=config.poll_interval,
            retry=RetryPolicy(config.max_attempts),
        )
        loop.run()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except ReadError as e:
        logger.error(f"Giving up after {config.max_attempts} attempts: {e}")
        return 1
    except OSError as e:
        logger.error(f"Failed to open output: {e}")
        return 1
    finally:
        if sink is not None:
            sink.close()
        link.close()
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    raise SystemExit(main())
