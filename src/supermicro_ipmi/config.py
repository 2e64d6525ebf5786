"""
Configuration Module

Loads BMC connection settings from a YAML file of the form:

    ipmi:
      host: 192.168.0.10
      username: ADMIN
      password: ADMIN
      verify_tls: false
      timeout: 10
"""

import logging
from dataclasses import dataclass

import yaml

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("host", "username", "password")


@dataclass
class ClientConfig:
    """Connection settings for one BMC"""
    host: str
    username: str
    password: str
    verify_tls: bool = False
    timeout: float = 10.0

    def __repr__(self) -> str:
        return (f"ClientConfig(host={self.host!r}, username={self.username!r}, "
                f"password='***', verify_tls={self.verify_tls!r}, timeout={self.timeout!r})")


def load_config(config_path: str) -> ClientConfig:
    """Load client configuration from YAML file

    Args:
        config_path: Path to configuration file

    Returns:
        ClientConfig with values from the ipmi section

    Raises:
        ValueError: If the ipmi section or a required key is missing,
            or timeout is not a positive number
    """
    with open(config_path) as f:
        config = yaml.safe_load(f) or {}

    section = config.get("ipmi") if isinstance(config, dict) else None
    if not isinstance(section, dict):
        raise ValueError(f"Missing 'ipmi' section in {config_path}")

    missing = [key for key in REQUIRED_KEYS if section.get(key) is None]
    if missing:
        raise ValueError(f"Missing required ipmi settings: {', '.join(missing)}")

    timeout = section.get("timeout", 10.0)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError(f"Invalid timeout: {timeout!r}")

    logger.debug(f"Loaded IPMI configuration for {section['host']} from {config_path}")
    return ClientConfig(
        host=str(section["host"]),
        username=str(section["username"]),
        password=str(section["password"]),
        verify_tls=bool(section.get("verify_tls", False)),
        timeout=float(timeout),
    )
