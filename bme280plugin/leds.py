"""
Status LEDs on plain GPIO lines, driven through the sysfs GPIO interface.

    /sys/class/gpio/export         <- write the line number to claim it
    /sys/class/gpio/gpioN/direction <- "out"
    /sys/class/gpio/gpioN/value     <- "1" / "0"

Sysfs line numbers are the BCM pin plus the base of the SoC's gpiochip. The
base is 0 on older Raspberry Pi kernels and 512 or more from 6.6 on; see
/sys/class/gpio/gpiochip*/base.
"""

from pathlib import Path

GPIO_PATH = "/sys/class/gpio"


class Led:
    def __init__(self, pin: int, gpio_path: str = GPIO_PATH, base: int = 0):
        self.pin = pin
        self.number = base + pin
        self.root = Path(gpio_path)

    @property
    def line(self) -> Path:
        return self.root / f"gpio{self.number}"

    def _export(self):
        if self.line.exists():
            return
        with open(self.root / "export", "w") as f:
            f.write(str(self.number))

    def _write(self, value: str):
        self._export()
        with open(self.line / "direction", "w") as f:
            f.write("out")
        with open(self.line / "value", "w") as f:
            f.write(value)

    def on(self):
        self._write("1")

    def off(self):
        self._write("0")
