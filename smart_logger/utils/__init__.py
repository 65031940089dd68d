"""
Utility functions and classes.
"""

from .modbus_tools import FloatCodec, ModbusTools

__all__ = [
    'FloatCodec',
    'ModbusTools'
]
