"""
Supermicro IPMI web interface client

Reads power consumption and sensors and controls power state through
the BMC's HTTP interface.
"""

import logging

from .config import ClientConfig, load_config
from .ipmi import (
    BaseIPMIClient,
    IPMIClient,
    IPMIConnectionError,
    IPMIError,
    PowerAction,
    Sensor,
    UnauthorizedError,
    UnexpectedValueError,
)

__version__ = "0.1.0"

# Leave handler configuration to the application
logging.getLogger('supermicro_ipmi').addHandler(logging.NullHandler())

__all__ = [
    'BaseIPMIClient',
    'ClientConfig',
    'IPMIClient',
    'IPMIConnectionError',
    'IPMIError',
    'PowerAction',
    'Sensor',
    'UnauthorizedError',
    'UnexpectedValueError',
    'load_config',
]
