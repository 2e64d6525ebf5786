"""
IPMI Web Interface Client Module

This module provides a client for the HTTP based IPMI web interface found on
Supermicro BMCs. It logs in through the CGI login form and talks to
/cgi/ipmi.cgi for power and sensor information.
"""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

import requests
import urllib3

from ..config import load_config
from .sensors import Sensor

logger = logging.getLogger(__name__)

LOGIN_PATH = "/cgi/login.cgi"
IPMI_PATH = "/cgi/ipmi.cgi"
LOGIN_SUCCESS_MARKER = "mainmenu"

# Time stamp names are always English, whatever the process locale
WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class PowerAction(Enum):
    """Power control actions accepted by POWER_INFO.XML"""
    OFF = 0      # Immediate power off
    ON = 1
    RESTART = 3


class IPMIError(Exception):
    """Base exception for IPMI-related errors"""
    pass


class IPMIConnectionError(IPMIError):
    """Raised when the BMC cannot be reached or returns an HTTP error"""
    pass


class UnauthorizedError(IPMIError):
    """Raised when the BMC rejects the login credentials"""
    pass


class UnexpectedValueError(IPMIError, ValueError):
    """Raised when a response lacks a value that has no fallback"""
    pass


class BaseIPMIClient:
    """Interface shared by IPMI web clients."""

    def login(self) -> None:
        """Authenticate against the BMC if not already logged in."""
        raise NotImplementedError

    def get_power_consumption(self) -> int:
        """Get current power consumption in watts."""
        raise NotImplementedError

    def get_sensors(self) -> List[Sensor]:
        """Get all sensors reported by the BMC."""
        raise NotImplementedError

    def get_power_status(self) -> bool:
        """Get power status, True when the server is on."""
        raise NotImplementedError

    def power_on(self) -> None:
        raise NotImplementedError

    def power_off(self) -> None:
        raise NotImplementedError

    def power_restart(self) -> None:
        raise NotImplementedError


class IPMIClient(BaseIPMIClient):
    """Handles login state and CGI requests for one BMC"""

    def __init__(self, host: str, username: str, password: str,
                 verify_tls: bool = False, timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        """Initialize IPMI client with connection details

        Args:
            host: BMC address (IPv4 192.168.0.1, IPv6 [2001:db8::1] or hostname)
            username: IPMI username
            password: IPMI password
            verify_tls: Verify the BMC certificate when using https
            timeout: Timeout in seconds for each HTTP request
            session: Optional requests session to use instead of a new one
        """
        self.host = host
        self.username = username
        self.password = password
        self.verify_tls = verify_tls
        self.timeout = timeout
        self.scheme = "http"
        self.logged_in = False
        self._scheme_checked = False
        self.session: Optional[requests.Session] = None
        self._owns_session = False

        self.set_http_session(session)

    @classmethod
    def from_config(cls, config_path: str) -> "IPMIClient":
        """Create a client from a YAML configuration file

        Args:
            config_path: Path to configuration file

        Returns:
            Configured IPMIClient

        Raises:
            ValueError: If the configuration is incomplete or invalid
        """
        config = load_config(config_path)
        return cls(
            config.host,
            config.username,
            config.password,
            verify_tls=config.verify_tls,
            timeout=config.timeout,
        )

    def set_http_session(self, session: Optional[requests.Session] = None) -> None:
        """Set the HTTP session used for all requests

        A session keeps the login cookie between requests. When no session
        is given a new one is created using the client's TLS settings.

        Args:
            session: Session to use, mainly for providing test doubles
        """
        if self._owns_session and self.session is not None:
            self.session.close()

        if session is not None:
            self.session = session
            self._owns_session = False
            return

        self.session = requests.Session()
        self._owns_session = True
        self.session.verify = self.verify_tls
        if not self.verify_tls:
            # BMCs commonly ship self-signed certificates
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def close(self) -> None:
        """Close the underlying HTTP session"""
        if self.session is not None:
            self.session.close()

    def __enter__(self) -> "IPMIClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def login(self) -> None:
        """Log in to the BMC web interface.

        Does nothing once logged in. Before the first login attempt the
        client probes for an http to https redirect and switches scheme
        if one is found.

        Raises:
            UnauthorizedError: If the login page does not lead to the main menu
            IPMIConnectionError: If the BMC cannot be reached
        """
        if self.logged_in:
            return

        self._check_secure_redirect()

        params = {
            "name": self.username,
            "pwd": self.password,
        }
        response = self._request("POST", LOGIN_PATH, data=params)

        if LOGIN_SUCCESS_MARKER not in response.text:
            logger.warning(f"Login to {self.host} failed for user {self.username}")
            raise UnauthorizedError(f"Login to {self.host} was rejected")

        self.logged_in = True
        logger.info(f"Logged in to {self.host} over {self.scheme}")

    def get_power_consumption(self) -> int:
        """Get current power consumption.

        Three response formats are known:
        1. POWER_CONSUMPTION.XML with PEAK Current
        2. POWER_CONSUMPTION.XML with NOW AVR (preferred over PEAK)
        3. Get_PowerSnrReading.XML with hex encoded PWR_Consumption,
           used by twin systems; only asked for when 1 and 2 give 0

        Returns:
            int: Power consumption in watts, 0 if not available
        """
        self.login()

        power = self._ipmi_request(self._build_params("POWER_CONSUMPTION.XML", "(0,0)"))

        result = 0
        current = self._find_attribute(power, "PEAK", "Current")
        if current is not None:
            result = self._parse_int(current)

        average = self._find_attribute(power, "NOW", "AVR")
        if average is not None:
            result = self._parse_int(average)

        if result == 0:
            logger.debug("No power reading in POWER_CONSUMPTION.XML, trying Get_PowerSnrReading.XML")
            power = self._ipmi_request({
                "Get_PowerSnrReading.XML": "(0,0)",
                "time_stamp": self._get_current_timestamp(),
                "_": "",
            })

            consumption = self._find_attribute(power, "PowerSnr", "PWR_Consumption")
            if consumption is not None:
                result = self._parse_int(consumption, base=16)

        return result

    def get_sensors(self) -> List[Sensor]:
        """Get sensor information.

        Returns:
            List[Sensor]: One Sensor per SENSOR element, in document order.
                Empty when the BMC does not answer with valid XML.
        """
        self.login()

        data = self._ipmi_request(self._build_params("SENSOR_INFO.XML", "(1,ff)"))

        sensors = []
        if data is None:
            return sensors

        sensor_info = data.find("SENSOR_INFO")
        if sensor_info is None:
            logger.debug("SENSOR_INFO.XML response has no SENSOR_INFO element")
            return sensors

        for element in sensor_info.findall("SENSOR"):
            attributes = {name: value.strip() for name, value in element.attrib.items()}
            sensors.append(Sensor(attributes))

        logger.debug(f"Read {len(sensors)} sensors from {self.host}")
        return sensors

    def get_power_status(self) -> bool:
        """Get power status.

        Returns:
            bool: True if the BMC reports the server as ON

        Raises:
            UnexpectedValueError: If the power status is missing from the response
        """
        self.login()

        return self._power_info_request(0, 0) == "ON"

    def power_on(self) -> None:
        """Power the server on"""
        self.set_power(PowerAction.ON)

    def power_off(self) -> None:
        """Power the server off immediately"""
        self.set_power(PowerAction.OFF)

    def power_restart(self) -> None:
        """Restart the server"""
        self.set_power(PowerAction.RESTART)

    def set_power(self, action: PowerAction) -> None:
        """Send a power control action

        Args:
            action: PowerAction to perform

        Raises:
            UnexpectedValueError: If the BMC does not confirm with a power status
        """
        self.login()

        status = self._power_info_request(1, action.value)
        logger.info(f"Power {action.name} sent to {self.host}, status {status}")

    def _check_secure_redirect(self) -> None:
        """Switch to https if the BMC redirects its index page with 301"""
        if self._scheme_checked:
            return

        response = self._request("GET", "/", allow_redirects=False)
        self._scheme_checked = True
        if response.status_code == 301:
            self.scheme = "https"
            logger.info(f"{self.host} redirects to https")

    def _get_uri(self, path: str) -> str:
        """Build full URI for path using the current scheme"""
        return f"{self.scheme}://{self.host}{path}"

    def _get_current_timestamp(self) -> str:
        """Return current time stamp as sent by the web interface

        Example of output: 'Mon Sep 09 2019 16:29:09 GMT+0200'
        """
        now = datetime.now().astimezone()
        return (f"{WEEKDAYS[now.weekday()]} {MONTHS[now.month - 1]} "
                f"{now.strftime('%d %Y %H:%M:%S')} GMT{now.strftime('%z')}")

    def _build_params(self, query: str, argument: str) -> Dict[str, str]:
        """Build request parameters understood by old and new firmware

        Old firmware expects the query as a key holding the argument, new
        firmware expects op and r. Both are always sent.
        """
        return {
            # Old style
            query: argument,
            "time_stamp": self._get_current_timestamp(),
            "_": "",
            # New style
            "op": query,
            "r": argument,
        }

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        """Send an HTTP request to the BMC

        Raises:
            IPMIConnectionError: On transport failure or HTTP error status
        """
        url = self._get_uri(path)
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.RequestException as e:
            raise IPMIConnectionError(f"{method} {url} failed: {e}") from e
        return response

    def _ipmi_request(self, params: Dict[str, str]) -> Optional[ET.Element]:
        """Send a request to /cgi/ipmi.cgi and parse the XML response

        Args:
            params: POST form parameters

        Returns:
            Root element of the response, or None if it is not valid XML
        """
        logger.debug(f"Requesting {next(iter(params), '')} from {self.host}")
        response = self._request("POST", IPMI_PATH, data=params)

        try:
            return ET.fromstring(response.content)
        except ET.ParseError as e:
            # Some firmware answers unsupported queries with invalid XML
            logger.debug(f"Invalid XML from {self.host}: {e}")
            return None

    def _power_info_request(self, mode: int, action: int) -> str:
        """Send a POWER_INFO.XML request

        Args:
            mode: 0 = read, 1 = write
            action: 0 = immediate off, 1 = on, 3 = restart

        Returns:
            Power status string reported by the BMC

        Raises:
            UnexpectedValueError: If the response has no power status
        """
        response = self._ipmi_request(self._build_params("POWER_INFO.XML", f"({mode},{action})"))

        if response is not None:
            power = response.find("POWER_INFO/POWER")
            if power is not None and "STATUS" in power.attrib:
                return power.attrib["STATUS"]

        raise UnexpectedValueError("Unable to fetch power status.")

    @staticmethod
    def _find_attribute(root: Optional[ET.Element], tag: str, attribute: str) -> Optional[str]:
        """Get attribute of the first child element with tag, or None"""
        if root is None:
            return None
        element = root.find(tag)
        if element is None:
            return None
        return element.get(attribute)

    @staticmethod
    def _parse_int(value: str, base: int = 10) -> int:
        """Parse a numeric attribute, returning 0 when it is not a reading

        Readings are watts, so negative values count as no reading.
        """
        value = value.strip()
        try:
            if base == 10:
                result = int(float(value))
            else:
                result = int(value, base)
        except (ValueError, OverflowError):
            logger.debug(f"Could not parse value from: {value!r}")
            return 0
        if result < 0:
            logger.debug(f"Ignoring negative reading: {value!r}")
            return 0
        return result
