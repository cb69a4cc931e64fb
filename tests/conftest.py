"""Shared fixtures: a default config pointed at a scratch GPIO tree, no sleeping, and a fake BME280."""

import pytest

from bme280plugin.config import DEFAULT_CONFIG

from smbus_fake import FakeBME280


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    """Sensor drivers wait for conversions; tests don't need to."""
    monkeypatch.setattr("bme280plugin.sensors.time.sleep", lambda seconds: None)


@pytest.fixture(autouse=True)
def fake_bme280(monkeypatch):
    """The BME280 library drives its own registers; swap it for a fake reading through the fake bus."""
    monkeypatch.setattr("bme280plugin.sensors.bme280.BME280", FakeBME280)


@pytest.fixture
def gpio_path(tmp_path):
    root = tmp_path / "gpio"
    (root / "gpio17").mkdir(parents=True)
    (root / "gpio18").mkdir(parents=True)
    return root


@pytest.fixture
def config(gpio_path):
    config = DEFAULT_CONFIG.copy()
    config["gpio_path"] = str(gpio_path)
    return config
