"""
Sensor Data Module

This module holds the value object for sensors reported by the BMC
web interface.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Dict, Iterator, Optional


class Sensor(Mapping):
    """Represents one SENSOR element of a SENSOR_INFO.XML response.

    The attribute set depends on the firmware, so a sensor is a read-only
    mapping of attribute name to value rather than a fixed record. Values
    are kept as the BMC sent them, with surrounding whitespace removed.
    Attributes can also be read as properties.

    Examples:
        >>> sensor = Sensor({"ID": "1", "NAME": "CPU Temp", "READING": "2d"})
        >>> sensor["NAME"]
        'CPU Temp'
        >>> sensor.READING
        '2d'
        >>> list(sensor)
        ['ID', 'NAME', 'READING']
    """

    __slots__ = ("_attributes",)

    def __init__(self, attributes: Optional[Dict[str, str]] = None):
        """Initialize sensor

        Args:
            attributes: Attribute names and values, in document order
        """
        object.__setattr__(self, "_attributes", MappingProxyType(dict(attributes or {})))

    @property
    def attributes(self) -> Dict[str, str]:
        """Get a copy of all attributes"""
        return dict(self._attributes)

    def __getitem__(self, name: str) -> str:
        return self._attributes[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._attributes)

    def __len__(self) -> int:
        return len(self._attributes)

    def __getattr__(self, name: str) -> str:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._attributes[name]
        except KeyError:
            raise AttributeError(f"Sensor has no attribute {name!r}") from None

    def __setattr__(self, name: str, value) -> None:
        raise AttributeError("Sensor is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("Sensor is immutable")

    def __hash__(self) -> int:
        return hash(tuple(self._attributes.items()))

    def __repr__(self) -> str:
        return f"Sensor({dict(self._attributes)!r})"
