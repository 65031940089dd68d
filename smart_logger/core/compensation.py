"""
Dynamic temperature compensation for EC readings.

The sensor firmware corrects EC to 25 °C with a fixed coefficient of 2 %/°C,
which over-compensates at low temperatures. The table below follows the
measured coefficient of the calibration solution instead.
"""
from typing import Final, Tuple

REFERENCE_TEMPERATURE: Final[float] = 25.0
SENSOR_FIXED_K: Final[float] = 0.0200

# (upper bound inclusive, coefficient)
COEFFICIENT_TABLE: Final[Tuple[Tuple[float, float], ...]] = (
    (5.0, 0.0180),
    (10.0, 0.0184),
    (15.0, 0.0190),
    (25.0, 0.0190),
    (30.0, 0.0192),
)
COEFFICIENT_ABOVE: Final[float] = 0.0194

TEMPERATURE_BANDS: Final[Tuple[Tuple[float, str], ...]] = (
    (5.0, "very cold (<=5 °C)"),
    (10.0, "cold (5-10 °C)"),
    (15.0, "cool (10-15 °C)"),
    (25.0, "normal (15-25 °C)"),
)


def coefficient(temp: float) -> float:
    """Return the compensation coefficient k for a temperature.

    Args:
        temp: Solution temperature in °C

    Returns:
        Coefficient per °C (e.g. 0.0190 for 1.90 %)
    """
    for upper, k in COEFFICIENT_TABLE:
        if temp <= upper:
            return k
    return COEFFICIENT_ABOVE


def compensate(raw_ec: float, temp: float) -> float:
    """Correct a raw EC reading to the 25 °C reference.

    C25 = raw_ec / (1 + k * (temp - 25))

    There is no lower bound on temperature; extreme values still follow the
    formula.
    """
    return raw_ec / (1.0 + coefficient(temp) * (temp - REFERENCE_TEMPERATURE))


def temperature_band(temp: float) -> str:
    """Name the compensation band a temperature falls into."""
    for upper, label in TEMPERATURE_BANDS:
        if temp <= upper:
            return label
    return "warm (>25 °C)"
