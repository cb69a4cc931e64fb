"""
Unit tests for configuration management.

These tests mock all file operations and test the core logic.
"""

import json
import pytest
from unittest.mock import Mock, patch

from bme280plugin.config import load_config, validate_config, get_config_path, DEFAULT_CONFIG


class TestConfig:
    """Test cases for configuration management."""

    def test_load_default_config(self):
        """Test loading default configuration when no file exists."""
        with patch('bme280plugin.config.get_config_path') as mock_get_path:
            mock_path = Mock()
            mock_path.exists.return_value = False
            mock_get_path.return_value = mock_path

            config = load_config()
            assert config == DEFAULT_CONFIG

    def test_default_returns_copy(self):
        with patch('bme280plugin.config.get_config_path') as mock_get_path:
            mock_get_path.return_value.exists.return_value = False
            config = load_config()
            config["profile"] = "flat"
            assert DEFAULT_CONFIG["profile"] == "qualified"

    def test_load_config_from_file(self):
        """Test loading configuration from file."""
        test_config = {
            "metric_key_prefix": "greenhouse",
            "profile": "flat",
            "bme280_address": 0x76,
        }

        with patch('bme280plugin.config.get_config_path') as mock_get_path, \
             patch('bme280plugin.config._read_config_file') as mock_read:

            mock_path = Mock()
            mock_path.exists.return_value = True
            mock_get_path.return_value = mock_path
            mock_read.return_value = test_config

            config = load_config()
            expected = DEFAULT_CONFIG.copy()
            expected.update(test_config)
            assert config == expected
            mock_read.assert_called_once_with(mock_path)

    def test_load_config_json_error(self):
        """Test loading configuration with invalid JSON."""
        with patch('bme280plugin.config.get_config_path') as mock_get_path, \
             patch('bme280plugin.config._read_config_file', side_effect=json.JSONDecodeError("msg", "doc", 0)):

            mock_path = Mock()
            mock_path.exists.return_value = True
            mock_get_path.return_value = mock_path

            with pytest.raises(RuntimeError, match="Failed to load config"):
                load_config()

    def test_load_config_real_file(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"i2c_bus": 0}))
        config = load_config(str(config_file))
        assert config["i2c_bus"] == 0
        assert config["metric_key_prefix"] == "bme280"

    def test_get_config_path_explicit(self):
        assert str(get_config_path("/tmp/x.json")) == "/tmp/x.json"

    def test_get_config_path_falls_back_to_user(self):
        with patch('bme280plugin.config.Path.exists', return_value=False):
            path = get_config_path()
        assert path.parts[-3:] == (".config", "bme280plugin", "config.json")


class TestValidateConfig:
    """Test cases for validate_config."""

    def setup_method(self):
        self.config = DEFAULT_CONFIG.copy()

    def test_defaults_are_valid(self):
        validate_config(self.config)

    def test_invalid_profile(self):
        self.config["profile"] = "fancy"
        with pytest.raises(ValueError, match="profile must be one of"):
            validate_config(self.config)

    def test_invalid_prefix(self):
        self.config["metric_key_prefix"] = 42
        with pytest.raises(ValueError, match="metric_key_prefix"):
            validate_config(self.config)

    def test_invalid_tempfile(self):
        self.config["tempfile"] = 3
        with pytest.raises(ValueError, match="tempfile"):
            validate_config(self.config)

    def test_invalid_bus(self):
        self.config["i2c_bus"] = -1
        with pytest.raises(ValueError, match="i2c_bus"):
            validate_config(self.config)

    def test_address_out_of_range(self):
        self.config["tsl2561_address"] = 0x80
        with pytest.raises(ValueError, match="tsl2561_address"):
            validate_config(self.config)

    def test_bool_is_not_an_address(self):
        self.config["sht2x_address"] = True
        with pytest.raises(ValueError, match="sht2x_address"):
            validate_config(self.config)

    def test_invalid_status_leds(self):
        self.config["status_leds"] = "yes"
        with pytest.raises(ValueError, match="status_leds"):
            validate_config(self.config)

    def test_invalid_led_pin(self):
        self.config["yellow_led_pin"] = "18"
        with pytest.raises(ValueError, match="yellow_led_pin"):
            validate_config(self.config)

    def test_invalid_log_level(self):
        self.config["log_level"] = "LOUD"
        with pytest.raises(ValueError, match="log_level"):
            validate_config(self.config)

    def test_gpio_base(self):
        self.config["gpio_base"] = 512
        validate_config(self.config)

    def test_invalid_gpio_base(self):
        self.config["gpio_base"] = -512
        with pytest.raises(ValueError, match="gpio_base"):
            validate_config(self.config)
