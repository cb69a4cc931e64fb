"""
Configuration management for bme280plugin.
"""

import json
from pathlib import Path
from typing import Dict, Any

from .schema import PROFILES, DEFAULT_PROFILE


DEFAULT_CONFIG = {
    "metric_key_prefix": "bme280",
    "tempfile": None,
    "profile": DEFAULT_PROFILE,
    "i2c_bus": 1,  # Rev 2 of Raspberry Pi and all newer use bus 1
    "bme280_address": 0x77,
    "sht2x_address": 0x40,
    "tsl2561_address": 0x29,
    "status_leds": True,
    "green_led_pin": 17,
    "yellow_led_pin": 18,
    "gpio_path": "/sys/class/gpio",
    # sysfs numbers the lines from the gpiochip base; 512 or more on Pi kernels 6.6+
    "gpio_base": 0,
    "log_level": "WARNING",
}

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def get_config_path(config_path: str = None) -> Path:
    """Get the path to the configuration file."""
    if config_path:
        return Path(config_path)

    # Try system config first, then user config
    system_config = Path("/etc/bme280plugin/config.json")
    user_config = Path.home() / ".config/bme280plugin/config.json"

    if system_config.exists():
        return system_config
    return user_config


def _read_config_file(config_file: Path) -> Dict[str, Any]:
    """Read configuration from file. Separated for testing."""
    with open(config_file, 'r') as f:
        return json.load(f)


def load_config(config_path: str = None) -> Dict[str, Any]:
    """Load configuration from file or return defaults."""
    config_file = get_config_path(config_path)

    if config_file.exists():
        try:
            user_config = _read_config_file(config_file)

            # Merge with defaults
            config = DEFAULT_CONFIG.copy()
            config.update(user_config)
            return config

        except (json.JSONDecodeError, IOError) as e:
            raise RuntimeError(f"Failed to load config from {config_file}: {e}")
    else:
        return DEFAULT_CONFIG.copy()


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> None:
    """Validate configuration values."""
    if not isinstance(config.get("metric_key_prefix"), str):
        raise ValueError("metric_key_prefix must be a string")

    if config.get("tempfile") is not None and not isinstance(config["tempfile"], str):
        raise ValueError("tempfile must be a path or null")

    if config.get("profile") not in PROFILES:
        raise ValueError(f"profile must be one of: {', '.join(PROFILES)}")

    if not _is_int(config.get("i2c_bus")) or config["i2c_bus"] < 0:
        raise ValueError("i2c_bus must be a non-negative integer")

    for name in ("bme280_address", "sht2x_address", "tsl2561_address"):
        if not _is_int(config.get(name)) or not 0x03 <= config[name] <= 0x77:
            raise ValueError(f"{name} must be a 7-bit I2C address between 0x03 and 0x77")

    if not isinstance(config.get("status_leds"), bool):
        raise ValueError("status_leds must be a boolean")

    for name in ("green_led_pin", "yellow_led_pin", "gpio_base"):
        if not _is_int(config.get(name)) or config[name] < 0:
            raise ValueError(f"{name} must be a non-negative integer")

    if config.get("log_level") not in LOG_LEVELS:
        raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")
