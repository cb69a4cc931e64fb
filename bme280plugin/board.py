"""
The device set for one collection cycle: the I2C bus plus every sensor on it.

A Board is built fresh for each cycle and torn down at its end, so nothing
about the bus survives from one cycle to the next.
"""

import logging
from typing import Any, Callable, Dict, List

from smbus2 import SMBus

from .sensors import BME280, SHT2x, TSL2561

logger = logging.getLogger(__name__)


def _bme280(bus, config):
    return BME280(bus, address=config["bme280_address"])


def _sht2x(bus, config):
    return SHT2x(bus, address=config["sht2x_address"])


def _tsl2561(bus, config):
    return TSL2561(bus, address=config["tsl2561_address"],
                   gain=TSL2561.GAIN_16X, integration_time=TSL2561.INTEGRATION_402MS)


DRIVERS: Dict[str, Callable] = {
    "bme280": _bme280,
    "sht2x": _sht2x,
    "tsl2561": _tsl2561,
}


class Board:
    """Bus handle and started devices, in the order they were configured."""

    def __init__(self, config: Dict[str, Any], devices: List[str],
                 bus_factory: Callable[[int], Any] = SMBus):
        self.config = config
        self.device_names = devices
        self.bus_factory = bus_factory
        self.bus = None
        self.devices: List[Any] = []

    def start(self) -> None:
        """Open the bus and start every device.

        Raises OSError if the bus cannot be opened or a device fails to start.
        Anything already acquired is released first.
        """
        try:
            self.bus = self.bus_factory(self.config["i2c_bus"])
            for name in self.device_names:
                device = DRIVERS[name](self.bus, self.config)
                device.start()
                logger.debug(f"Started {device.model} at 0x{device.address:02x}")
                self.devices.append(device)
        except OSError:
            self.stop()
            raise

    def stop(self) -> None:
        """Halt started devices and close the bus. Safe to call more than once."""
        for device in self.devices:
            try:
                device.halt()
            except OSError as e:
                logger.warning(f"Failed to halt {device.model}: {e}")
        self.devices = []
        if self.bus is not None:
            self.bus.close()
            self.bus = None
            logger.debug("Closed I2C bus")
