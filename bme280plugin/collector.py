"""
The collection cycle: acquire the board, read every sensor once, release.

A failed read drops only the keys that depend on it. A failed acquisition
fails the whole cycle with CollectionError and lights the yellow LED.
"""

import concurrent.futures
import logging
import math
from typing import Any, Callable, Dict, Optional

from .board import Board
from .humidity import calc_absolute_humidity
from .leds import Led
from .schema import Profile

logger = logging.getLogger(__name__)


class CollectionError(RuntimeError):
    """The device set could not be acquired; no snapshot was produced."""


def _read(device, field: str) -> Optional[float]:
    try:
        return float(getattr(device, field)())
    except OSError as e:
        logger.warning(f"{device.model}: failed to read {field}: {e}")
        return None


def _indicate(led: Optional[Led], lit: bool) -> None:
    if led is None:
        return
    try:
        if lit:
            led.on()
        else:
            led.off()
    except OSError as e:
        logger.warning(f"Failed to switch LED on GPIO {led.pin} (sysfs line {led.number}): {e}")


class Collector:
    """Runs collection cycles for one profile.

    `board_factory` builds a new, unstarted Board for every cycle.
    """

    def __init__(self, config: Dict[str, Any], profile: Profile,
                 board_factory: Optional[Callable[[], Board]] = None):
        self.config = config
        self.profile = profile
        self.board_factory = board_factory or (lambda: Board(config, profile.devices))
        self.green_led = None
        self.yellow_led = None
        if config["status_leds"]:
            self.green_led = Led(config["green_led_pin"], config["gpio_path"], config["gpio_base"])
            self.yellow_led = Led(config["yellow_led_pin"], config["gpio_path"], config["gpio_base"])

    def fetch_metrics(self) -> Dict[str, float]:
        """Run one cycle and return its snapshot.

        Raises CollectionError if the bus or a device could not be started.
        """
        _indicate(self.yellow_led, False)
        board = self.board_factory()
        try:
            board.start()
        except OSError as e:
            _indicate(self.green_led, False)
            _indicate(self.yellow_led, True)
            raise CollectionError(f"Failed to fetch metrics: {e}") from e

        try:
            with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
                future = executor.submit(self._work, board)
                metrics = future.result()
        finally:
            board.stop()
        return metrics

    def _work(self, board: Board) -> Dict[str, float]:
        _indicate(self.green_led, True)

        metrics: Dict[str, float] = {}
        for device in board.devices:
            if hasattr(device, "luminosity"):
                metrics.update(self._read_light(device))
            else:
                metrics.update(self._read_climate(device))
        return metrics

    def _read_climate(self, device) -> Dict[str, float]:
        key = self.profile.key
        metrics = {}
        readings = {field: _read(device, field) for field in device.fields}

        t = readings.get("temperature")
        if t is not None:
            metrics[key("temperature", device.model)] = t

        p = readings.get("pressure")
        if p is not None:
            metrics[key("pressure", device.model)] = p / 100.0

        rh = readings.get("humidity")
        if rh is not None:
            metrics[key("humidity", device.model)] = rh
            if t is not None:
                try:
                    ah = calc_absolute_humidity(t, rh)
                except (ZeroDivisionError, OverflowError):
                    ah = math.nan
                if math.isfinite(ah):
                    metrics[key("abs_humidity", device.model)] = ah
                else:
                    logger.warning(f"{device.model}: absolute humidity undefined for t={t} rh={rh}")
        return metrics

    def _read_light(self, device) -> Dict[str, float]:
        key = self.profile.key
        try:
            broadband, ir = device.luminosity()
        except OSError as e:
            logger.warning(f"{device.model}: failed to read luminosity: {e}")
            return {}
        return {
            key("raw_illum", device.model, "broadband"): float(broadband),
            key("raw_illum", device.model, "infrared"): float(ir),
            key("illuminance", device.model): float(device.calculate_lux(broadband, ir)),
        }
