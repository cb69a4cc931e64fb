"""
Drivers for the I2C sensors read by the plugin.

Each driver talks to an already-open smbus2.SMBus handle (or anything with the
same duck-typed methods) and raises OSError when the device misbehaves, the
same way smbus2 itself reports bus errors.

Every sensor exposes:

    model    - name used in device-qualified metric keys
    fields   - which of temperature/pressure/humidity it can read
    start()  - probe and configure the device
    halt()   - leave the device idle
"""

import errno
import time
from typing import Tuple

import bme280


def unit_float(msb, lsb) -> float:
    return (msb * 256.0 + lsb) / 65536.0


def crc8(data) -> int:
    """CRC-8 used by the Sensirion SHT2x family, polynomial x^8+x^5+x^4+1 (0x131)."""
    crc = 0
    for byte in data:
        crc ^= byte
        for _ in range(8):
            if crc & 0x80:
                crc = ((crc << 1) ^ 0x131) & 0xFF
            else:
                crc = (crc << 1) & 0xFF
    return crc


class BME280(object):
    """Bosch BME280 combined temperature / pressure / humidity sensor.

    Register access and compensation are left to the pimoroni `bme280`
    library, which shares the board's SMBus handle. The chip is run in forced
    mode, so every reading triggers one conversion and the chip sleeps again
    afterwards.
    """
    model = "BME280"
    fields = ("temperature", "pressure", "humidity")

    DEFAULT_ADDR = 0x77

    def __init__(self, bus, address: int = DEFAULT_ADDR):
        self.address = address
        self.device = bme280.BME280(i2c_addr=address, i2c_dev=bus)

    def start(self):
        try:
            self.device.setup(mode="forced")
        except RuntimeError as e:
            # the library reports a missing chip or wrong chip id this way
            raise OSError(errno.ENODEV, str(e)) from e

    def halt(self):
        pass

    def temperature(self) -> float:
        return self.device.get_temperature()

    def pressure(self) -> float:
        """Pressure in Pa. The library reports hPa."""
        return self.device.get_pressure() * 100.0

    def humidity(self) -> float:
        return self.device.get_humidity()


class SHT2x(object):
    """Sensirion SHT2x (and the compatible HTU21D) temperature / humidity sensor."""
    model = "SHT2x"
    fields = ("temperature", "humidity")

    DEFAULT_ADDR = 0x40
    CMD_READ_TEMP = 0xE3
    CMD_READ_HUM = 0xE5
    CMD_RESET = 0xFE

    def __init__(self, bus, address: int = DEFAULT_ADDR):
        self.bus = bus
        self.address = address

    def start(self):
        self.reset()
        # soft reset takes up to 15ms
        time.sleep(0.015)

    def halt(self):
        pass

    def reset(self):
        self.bus.write_byte(self.address, self.CMD_RESET)

    def _read_raw(self, cmd: int) -> float:
        msb, lsb, crc = self.bus.read_i2c_block_data(self.address, cmd, 3)
        if crc8((msb, lsb)) != crc:
            raise OSError(errno.EIO, f"SHT2x CRC mismatch on command 0x{cmd:02x}")
        # two low bits are status
        return unit_float(msb, lsb & 0xFC)

    def temperature(self) -> float:
        """We model temperature sensor as linear output from -46.85C to 128.87 in 65536 steps"""
        return -46.85 + 175.72 * self._read_raw(self.CMD_READ_TEMP)

    def humidity(self) -> float:
        """We model humidity sensor as having linear output from -6% to 119% in 65536 steps"""
        return -6.0 + 125.0 * self._read_raw(self.CMD_READ_HUM)


class TSL2561(object):
    """TAOS TSL2561 light-to-digital converter, T/FN/CL package.

    Reads the broadband (visible + IR) and infrared photodiodes and turns them
    into lux with the integer approximation from the datasheet.
    """
    model = "TSL2561"
    fields = ()

    DEFAULT_ADDR = 0x39

    CMD = 0x80
    CMD_WORD = 0x20
    REG_CONTROL = 0x00
    REG_TIMING = 0x01
    REG_ID = 0x0A
    REG_CHAN0 = 0x0C
    REG_CHAN1 = 0x0E

    PART_NUMBERS = (0x0, 0x1, 0x4, 0x5)

    POWER_ON = 0x03
    POWER_OFF = 0x00

    GAIN_1X = 0x00
    GAIN_16X = 0x10

    INTEGRATION_13MS = 0x00
    INTEGRATION_101MS = 0x01
    INTEGRATION_402MS = 0x02

    LUX_SCALE = 14
    RATIO_SCALE = 9
    CH_SCALE = 10
    # integration time -> (seconds to wait, clipping threshold, channel scale)
    TIMINGS = {
        INTEGRATION_13MS: (0.015, 4900, 0x7517),
        INTEGRATION_101MS: (0.120, 37000, 0x0FE7),
        INTEGRATION_402MS: (0.450, 65000, 1 << CH_SCALE),
    }
    SATURATED = 65536

    # (ratio upper bound K, B, M) for the T, FN and CL packages
    COEFFICIENTS = [
        (0x0040, 0x01F2, 0x01BE),
        (0x0080, 0x0214, 0x02D1),
        (0x00C0, 0x023F, 0x037B),
        (0x0100, 0x0270, 0x03FE),
        (0x0138, 0x016F, 0x01FC),
        (0x019A, 0x00D2, 0x00FB),
        (0x029A, 0x0018, 0x0012),
    ]

    def __init__(self, bus, address: int = DEFAULT_ADDR, gain: int = GAIN_16X,
                 integration_time: int = INTEGRATION_402MS):
        self.bus = bus
        self.address = address
        self.gain = gain
        self.integration_time = integration_time

    def start(self):
        self._enable()
        try:
            ident = self.bus.read_byte_data(self.address, self.CMD | self.REG_ID)
            # high nibble is the part number; the whole TSL256x family shares this register map
            if ident >> 4 not in self.PART_NUMBERS:
                raise OSError(errno.ENODEV, f"TSL2561 not found at 0x{self.address:02x}")
            self.bus.write_byte_data(self.address, self.CMD | self.REG_TIMING, self.integration_time | self.gain)
        finally:
            self._disable()

    def halt(self):
        self._disable()

    def _enable(self):
        self.bus.write_byte_data(self.address, self.CMD | self.REG_CONTROL, self.POWER_ON)

    def _disable(self):
        self.bus.write_byte_data(self.address, self.CMD | self.REG_CONTROL, self.POWER_OFF)

    def luminosity(self) -> Tuple[int, int]:
        """Return raw (broadband, infrared) counts from one integration cycle."""
        wait, _, _ = self.TIMINGS[self.integration_time]
        self._enable()
        try:
            time.sleep(wait)
            broadband = self.bus.read_word_data(self.address, self.CMD | self.CMD_WORD | self.REG_CHAN0)
            ir = self.bus.read_word_data(self.address, self.CMD | self.CMD_WORD | self.REG_CHAN1)
        finally:
            self._disable()
        return broadband, ir

    def calculate_lux(self, broadband: int, ir: int) -> int:
        _, clip, ch_scale = self.TIMINGS[self.integration_time]
        if broadband > clip or ir > clip:
            return self.SATURATED
        if self.gain == self.GAIN_1X:
            ch_scale = ch_scale << 4

        channel0 = (broadband * ch_scale) >> self.CH_SCALE
        channel1 = (ir * ch_scale) >> self.CH_SCALE

        ratio1 = 0
        if channel0 != 0:
            ratio1 = (channel1 << (self.RATIO_SCALE + 1)) // channel0
        ratio = (ratio1 + 1) >> 1

        b, m = 0, 0
        for k, kb, km in self.COEFFICIENTS:
            if ratio <= k:
                b, m = kb, km
                break

        temp = channel0 * b - channel1 * m
        if temp < 0:
            temp = 0
        temp += 1 << (self.LUX_SCALE - 1)
        return temp >> self.LUX_SCALE

