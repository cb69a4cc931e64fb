"""
Duck-typed fake for smbus2.SMBus, plus a stand-in for the pimoroni BME280.

Registers are a plain dict keyed by (address, register). Block reads return
the first n bytes of a stored list. Anything not in the dict, or listed in
`fail`, raises OSError the way a real bus does on a NACK.

Pass it to Board as the bus factory:

    bus = SMBus(1, registers=full_registers())
    board = Board(config, devices, bus_factory=lambda n: bus)

The BME280 is read through the `bme280` library, so its calibration and
compensation are not modelled here. FakeBME280 takes the library class's
place and answers fixed readings, but still touches the fake bus so that
addresses and `fail` apply to it too.
"""

import errno

from bme280plugin.sensors import crc8

BME280_ADDR = 0x77
SHT2X_ADDR = 0x40
TSL2561_ADDR = 0x29

BME280_CHIP_ID = 0x60
BME280_REG_CHIP_ID = 0xD0
BME280_REG_DATA = 0xF7

# what FakeBME280 reports; pressure in hPa, as the library does
BME280_TEMPERATURE = 22.5
BME280_PRESSURE = 1006.53
BME280_HUMIDITY = 55.0


class SMBus:
    def __init__(self, busno, registers=None, fail=()):
        self.busno = busno
        self.registers = dict(registers or {})
        self.fail = set(fail)
        self.writes = []
        self.closed = False

    def _get(self, addr, reg):
        if (addr, reg) in self.fail or (addr, reg) not in self.registers:
            raise OSError(errno.EREMOTEIO, "Remote I/O error")
        return self.registers[(addr, reg)]

    def write_byte(self, addr, cmd):
        if (addr, cmd) in self.fail:
            raise OSError(errno.EREMOTEIO, "Remote I/O error")
        self.writes.append((addr, cmd))

    def write_byte_data(self, addr, reg, value):
        if (addr, reg) in self.fail:
            raise OSError(errno.EREMOTEIO, "Remote I/O error")
        self.writes.append((addr, reg, value))

    def read_byte_data(self, addr, reg) -> int:
        return self._get(addr, reg)

    def read_word_data(self, addr, reg) -> int:
        return self._get(addr, reg)

    def read_i2c_block_data(self, addr, reg, length) -> list:
        return list(self._get(addr, reg))[:length]

    def close(self):
        self.closed = True


class FakeBME280:
    """Same constructor and getters as bme280.BME280."""

    def __init__(self, i2c_addr=0x76, i2c_dev=None):
        self._i2c_addr = i2c_addr
        self._i2c_dev = i2c_dev
        self.mode = None

    def setup(self, mode="normal", **kwargs):
        try:
            chip_id = self._i2c_dev.read_byte_data(self._i2c_addr, BME280_REG_CHIP_ID)
        except IOError:
            raise RuntimeError(f"Unable to find bme280 on 0x{self._i2c_addr:02x}, IOError")
        if chip_id != BME280_CHIP_ID:
            raise RuntimeError(f"Unable to find bme280 on 0x{self._i2c_addr:02x}, CHIP_ID returned {chip_id:02x}")
        self.mode = mode

    def update_sensor(self):
        self._i2c_dev.read_i2c_block_data(self._i2c_addr, BME280_REG_DATA, 8)

    def get_temperature(self):
        self.update_sensor()
        return BME280_TEMPERATURE

    def get_pressure(self):
        self.update_sensor()
        return BME280_PRESSURE

    def get_humidity(self):
        self.update_sensor()
        return BME280_HUMIDITY


def bme280_registers(addr=BME280_ADDR, chip_id=BME280_CHIP_ID):
    return {
        (addr, BME280_REG_CHIP_ID): chip_id,
        (addr, BME280_REG_DATA): [0] * 8,
    }


def sht2x_registers(addr=SHT2X_ADDR, temp=(123, 34), hum=(0x68, 0x3A)):
    return {
        (addr, 0xE3): [temp[0], temp[1], crc8(temp)],
        (addr, 0xE5): [hum[0], hum[1], crc8(hum)],
    }


def tsl2561_registers(addr=TSL2561_ADDR, broadband=1000, ir=200):
    return {
        (addr, 0x8A): 0x50,
        (addr, 0xAC): broadband,
        (addr, 0xAE): ir,
    }


def full_registers():
    registers = {}
    registers.update(bme280_registers())
    registers.update(sht2x_registers())
    registers.update(tsl2561_registers())
    return registers
