"""
bme280plugin - a Mackerel agent plugin for I2C environmental sensors.

Reads temperature, pressure, humidity and light from sensors wired to a
Raspberry Pi and reports them, with absolute humidity derived on the fly.
"""

__version__ = "0.1.0"
__author__ = "bme280plugin Team"
