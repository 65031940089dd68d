"""
Calibration command sequencing for the EC4A sensor.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple, Union

from .constants import (CAL_MODE_1_VALUE, CAL_MODE_2_VALUE,
                        CALIBRATION_COEFF_VALUE, DEFAULT_REGISTER_MAP,
                        FLOAT_TOLERANCE, SETTLE_DELAY, TEST_K_VALUE,
                        VERIFY_DELAY, CalibrationMode, ModbusDataType,
                        RegisterMap)
from .errors import (CalibrationError, InvalidCalibrationMode, ReadError,
                     WriteError)
from .modbus import ModbusLink
from .timing import Clock, SystemClock
from ..utils.modbus_tools import FloatCodec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalibrationStep:
    """One register write, optionally followed by a read-back."""

    register: int
    value: Union[int, float]
    width: ModbusDataType = ModbusDataType.UINT16
    verify: bool = True


@dataclass(frozen=True)
class CalibrationCommand:
    """Ordered writes for one calibration mode."""

    mode: CalibrationMode
    steps: Tuple[CalibrationStep, ...] = ()


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of reading a calibration write back."""

    register: int
    expected: Union[int, float]
    actual: Optional[Union[int, float]]

    @property
    def verified(self) -> bool:
        return self.actual is not None

    def matches(self, tolerance: float = FLOAT_TOLERANCE) -> bool:
        if self.actual is None:
            return False
        if isinstance(self.expected, float):
            return abs(self.actual - self.expected) < tolerance
        return self.actual == self.expected


@dataclass
class CalibrationReport:
    """What a calibration run wrote and read back."""

    mode: CalibrationMode
    steps_completed: int = 0
    verifications: List[VerificationResult] = field(default_factory=list)
    mismatches: List[VerificationResult] = field(default_factory=list)

    @property
    def skipped(self) -> bool:
        return self.mode == CalibrationMode.SKIP


def parse_mode(value: Any) -> CalibrationMode:
    """Convert user input to a calibration mode.

    Raises:
        InvalidCalibrationMode: If value is not an integer 0-3
    """
    if isinstance(value, CalibrationMode):
        return value
    if isinstance(value, bool):
        raise InvalidCalibrationMode(value)
    try:
        number = int(str(value).strip())
    except ValueError:
        raise InvalidCalibrationMode(value) from None
    try:
        return CalibrationMode(number)
    except ValueError:
        raise InvalidCalibrationMode(value) from None


def select_mode(value: Any) -> CalibrationMode:
    """Like :func:`parse_mode` but fall back to SKIP on invalid input."""
    try:
        return parse_mode(value)
    except InvalidCalibrationMode as e:
        logger.warning(f"{e}. Defaulting to mode 0 (skip)")
        return CalibrationMode.SKIP


def build_command(
    mode: CalibrationMode,
    registers: RegisterMap = DEFAULT_REGISTER_MAP
) -> CalibrationCommand:
    """Build the write sequence for a mode.

    Args:
        mode: Selected calibration mode
        registers: Register map of the sensor

    Returns:
        Command holding the ordered steps
    """
    mode = parse_mode(mode)
    if mode == CalibrationMode.MODE_1:
        steps = (
            CalibrationStep(registers.calibration_mode, CAL_MODE_1_VALUE),
        )
    elif mode == CalibrationMode.MODE_2:
        steps = (
            CalibrationStep(registers.calibration_coeff, CALIBRATION_COEFF_VALUE,
                            ModbusDataType.FLOAT32),
            CalibrationStep(registers.calibration_mode, CAL_MODE_2_VALUE),
        )
    elif mode == CalibrationMode.TEST_K:
        steps = (
            CalibrationStep(registers.test_k, TEST_K_VALUE),
        )
    else:
        steps = ()
    return CalibrationCommand(mode=mode, steps=steps)


class CalibrationEngine:
    """Runs a calibration command against a bound link.

    Read-back verification is advisory: a mismatch or failed read-back is
    logged and recorded, never raised. Only a failed write aborts the
    sequence.
    """

    def __init__(
        self,
        registers: RegisterMap = DEFAULT_REGISTER_MAP,
        clock: Optional[Clock] = None,
        settle_delay: float = SETTLE_DELAY,
        verify_delay: float = VERIFY_DELAY,
        tolerance: float = FLOAT_TOLERANCE
    ):
        """Initialize engine.

        Args:
            registers: Register map of the sensor
            clock: Clock used for pauses
            settle_delay: Pause after a command so the firmware applies it
            verify_delay: Pause between a float write and its read-back
            tolerance: Allowed difference when verifying floats
        """
        self.registers = registers
        self.clock = clock or SystemClock()
        self.settle_delay = settle_delay
        self.verify_delay = verify_delay
        self.tolerance = tolerance
        self.cursor = 0

    def execute(self, link: ModbusLink, mode: Any) -> CalibrationReport:
        """Run the calibration sequence for a mode.

        Args:
            link: Bound sensor link
            mode: Calibration mode (0-3); anything else is treated as 0

        Returns:
            Report of written steps and read-back results

        Raises:
            CalibrationError: If a write fails; later steps are not attempted
        """
        command = build_command(select_mode(mode), self.registers)
        report = CalibrationReport(mode=command.mode)
        self.cursor = 0

        if command.mode == CalibrationMode.SKIP:
            logger.info("Calibration skipped (mode 0)")
            return report

        logger.info(f"Executing calibration mode {int(command.mode)} ({len(command.steps)} steps)")
        try:
            for step in command.steps:
                self._write(link, step)
                if step.verify:
                    result = self._verify(link, step)
                    report.verifications.append(result)
                    if not result.matches(self.tolerance):
                        report.mismatches.append(result)
                self.cursor += 1
                report.steps_completed = self.cursor
        except WriteError as e:
            logger.error(f"Calibration mode {int(command.mode)} failed: {e}")
            raise CalibrationError(e.address, e) from e
        finally:
            # Give the firmware time to apply the new setting
            self.clock.wait(self.settle_delay)

        logger.info(f"Calibration mode {int(command.mode)} completed")
        return report

    def _write(self, link: ModbusLink, step: CalibrationStep) -> None:
        if step.width == ModbusDataType.FLOAT32:
            high, low = FloatCodec.encode(step.value)
            logger.info(
                f"Writing float {step.value:.3f} to registers {step.register}-{step.register + 1} "
                f"(hex {FloatCodec.to_hex(high, low)})"
            )
            link.write_registers(step.register, [high, low])
        else:
            logger.info(f"Writing {step.value} (0x{step.value:04X}) to register {step.register}")
            link.write_register(step.register, int(step.value))

    def _verify(self, link: ModbusLink, step: CalibrationStep) -> VerificationResult:
        try:
            if step.width == ModbusDataType.FLOAT32:
                self.clock.wait(self.verify_delay)
                actual = link.read_float(step.register)
            else:
                actual = link.read_uint16(step.register)
        except ReadError as e:
            logger.warning(f"Could not verify write to register {step.register}: {e}")
            return VerificationResult(step.register, step.value, None)

        result = VerificationResult(step.register, step.value, actual)
        if result.matches(self.tolerance):
            logger.info(f"Register {step.register} verified: {actual}")
        else:
            logger.warning(
                f"Read-back of register {step.register} differs: "
                f"expected {step.value}, got {actual}"
            )
        return result
