"""
IPMI Web Interface Package

This package provides an interface for the HTTP based IPMI web interface of
Supermicro BMCs, covering power readings, sensor listing and power control.

Key Components:
- IPMIClient: Session handling and CGI requests for one BMC
- Sensor: Read-only attribute map for one sensor

Features:
- Cookie based login with automatic http to https detection
- Requests understood by both old and new firmware
- Tolerant XML parsing with fallbacks for different board types

Example Usage:
    >>> from supermicro_ipmi.ipmi import IPMIClient
    >>>
    >>> with IPMIClient("192.168.0.10", "ADMIN", "ADMIN") as client:
    ...     print(client.get_power_consumption())
    ...     for sensor in client.get_sensors():
    ...         print(sensor.get("NAME"), sensor.get("READING"))
    ...     if not client.get_power_status():
    ...         client.power_on()
"""

from .client import (
    BaseIPMIClient,
    IPMIClient,
    IPMIConnectionError,
    IPMIError,
    PowerAction,
    UnauthorizedError,
    UnexpectedValueError,
)
from .sensors import Sensor

__all__ = [
    'BaseIPMIClient',
    'IPMIClient',
    'IPMIConnectionError',
    'IPMIError',
    'PowerAction',
    'Sensor',
    'UnauthorizedError',
    'UnexpectedValueError',
]
