"""
Tests for configuration loading
"""

import pytest
import yaml
from unittest.mock import Mock, patch

from supermicro_ipmi.config import ClientConfig, load_config
from supermicro_ipmi.ipmi.client import IPMIClient

# Test configuration
TEST_CONFIG = {
    "ipmi": {
        "host": "192.168.0.10",
        "username": "ADMIN",
        "password": "secret",
        "verify_tls": True,
        "timeout": 5,
    }
}


def write_config(tmp_path, config) -> str:
    """Write config dict to a temporary YAML file"""
    config_file = tmp_path / "config.yaml"
    with open(config_file, "w") as f:
        yaml.dump(config, f)
    return str(config_file)


@pytest.fixture
def mock_config(tmp_path):
    """Create a temporary config file"""
    return write_config(tmp_path, TEST_CONFIG)


def test_load_config(mock_config):
    """Test all settings are read"""
    config = load_config(mock_config)
    assert config == ClientConfig(
        host="192.168.0.10",
        username="ADMIN",
        password="secret",
        verify_tls=True,
        timeout=5.0,
    )


def test_defaults(tmp_path):
    """Test optional settings fall back to defaults"""
    path = write_config(tmp_path, {"ipmi": {"host": "bmc", "username": "u", "password": "p"}})
    config = load_config(path)
    assert config.verify_tls is False
    assert config.timeout == 10.0


def test_missing_section(tmp_path):
    """Test missing ipmi section"""
    path = write_config(tmp_path, {"fans": {}})
    with pytest.raises(ValueError, match="ipmi"):
        load_config(path)


def test_empty_file(tmp_path):
    """Test empty config file"""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("")
    with pytest.raises(ValueError, match="ipmi"):
        load_config(str(config_file))


def test_missing_keys(tmp_path):
    """Test missing required settings are listed"""
    path = write_config(tmp_path, {"ipmi": {"host": "bmc"}})
    with pytest.raises(ValueError, match="username, password"):
        load_config(path)


@pytest.mark.parametrize("timeout", [0, -1, "fast", True])
def test_invalid_timeout(tmp_path, timeout):
    """Test timeout must be a positive number"""
    config = {"ipmi": {"host": "bmc", "username": "u", "password": "p", "timeout": timeout}}
    path = write_config(tmp_path, config)
    with pytest.raises(ValueError, match="timeout"):
        load_config(path)


def test_password_hidden(mock_config):
    """Test repr does not show the password"""
    assert "secret" not in repr(load_config(mock_config))


def test_client_from_config(mock_config):
    """Test building a client from the config file"""
    with patch("supermicro_ipmi.ipmi.client.requests.Session", return_value=Mock()):
        client = IPMIClient.from_config(mock_config)

    assert client.host == "192.168.0.10"
    assert client.username == "ADMIN"
    assert client.password == "secret"
    assert client.verify_tls is True
    assert client.timeout == 5.0
    assert client.session.verify is True


def test_empty_password_allowed(tmp_path):
    """Test an empty password is a valid setting"""
    path = write_config(tmp_path, {"ipmi": {"host": "bmc", "username": "ADMIN", "password": ""}})
    config = load_config(path)
    assert config.password == ""


def test_null_password_missing(tmp_path):
    """Test a password without value is reported missing"""
    path = write_config(tmp_path, {"ipmi": {"host": "bmc", "username": "ADMIN", "password": None}})
    with pytest.raises(ValueError, match="password"):
        load_config(path)
