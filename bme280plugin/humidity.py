"""Humidity conversions."""

import math


def calc_absolute_humidity(t: float, rh: float) -> float:
    """Absolute humidity (g/m^3) from temperature (C) and relative humidity (%).

    Based on Bolton's equation for saturation vapour pressure:

    Bolton, D., The computation of equivalent potential temperature,
    Monthly Weather Review, 108, 1046-1053, 1980.

    Undefined at t == -273.15. Meaningful roughly between -20C and 50C.

    >>> round(calc_absolute_humidity(20.0, 50.0), 3)
    8.639
    """
    return 6.112 * math.exp(17.67 * t / (t + 243.5)) * rh * 2.1674 / (273.15 + t)
