"""
Sensor-specific plugin implementations.
"""

from .boqu import Ec4aSensor

__all__ = [
    'Ec4aSensor'
]
