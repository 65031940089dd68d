"""
Smart EC logger for the BOQU IOT-485-EC4A conductivity sensor.
"""

__version__ = "0.1.0"
