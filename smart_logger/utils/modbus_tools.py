"""
Utility functions for register encoding and data validation.
"""
import struct
from typing import Sequence, Tuple


class FloatCodec:
    """IEEE-754 single precision over two registers, ABCD (big-endian) order.

    The high word is stored at the lower address. No rounding or range
    checking is done: every 32-bit pattern decodes to some float, and NaN
    and infinity pass through untouched.
    """

    @staticmethod
    def decode(high: int, low: int) -> float:
        """Combine a register pair into a float.

        Args:
            high: Register at the lower address (bytes A, B)
            low: Register at the higher address (bytes C, D)

        Returns:
            Decoded float value
        """
        raw = struct.pack('>HH', high & 0xFFFF, low & 0xFFFF)
        return struct.unpack('>f', raw)[0]

    @staticmethod
    def encode(value: float) -> Tuple[int, int]:
        """Split a float into (high, low) register words.

        Args:
            value: Float to encode

        Returns:
            Tuple of (high word, low word)
        """
        raw = struct.pack('>f', value)
        high, low = struct.unpack('>HH', raw)
        return high, low

    @staticmethod
    def decode_registers(registers: Sequence[int]) -> float:
        """Decode the first two words of a register read."""
        if len(registers) < 2:
            raise ValueError(f"Float needs 2 registers, got {len(registers)}")
        return FloatCodec.decode(registers[0], registers[1])

    @staticmethod
    def to_hex(high: int, low: int) -> str:
        """Format a register pair as 8 upper-case hex digits.

        Logging the raw words next to the decoded value lets the conversion
        be checked by hand, e.g. (0x4135, 0x1A86) -> "41351A86".
        """
        return f"{high & 0xFFFF:04X}{low & 0xFFFF:04X}"


class ModbusTools:
    """Modbus debugging helpers."""

    @staticmethod
    def format_register(value: int) -> str:
        """Format a single register as 0xHHHH."""
        return f"0x{value & 0xFFFF:04X}"

    @staticmethod
    def format_bytes(data: bytes) -> str:
        """Format bytes as hex string.

        Args:
            data: Bytes to format

        Returns:
            Formatted hex string
        """
        return " ".join(f"{b:02X}" for b in data)
