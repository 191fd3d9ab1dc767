import re
from typing import Tuple

# Light gray used whenever a color string cannot be parsed.
DEFAULT_RGB: Tuple[float, float, float] = (0.8, 0.8, 0.8)

_HEX_PATTERN = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)


def hex_to_rgb(value: str) -> Tuple[float, float, float]:
    """
    Converts '#rrggbb' (or 'rrggbb') to normalized (r, g, b) channels in [0, 1].

    Malformed input never raises: a bad color is cosmetic, so DEFAULT_RGB is
    returned instead.
    """
    if not isinstance(value, str):
        return DEFAULT_RGB

    match = _HEX_PATTERN.match(value)
    if not match:
        return DEFAULT_RGB

    r, g, b = (int(group, 16) / 255 for group in match.groups())
    return r, g, b


def rgb_to_hex(rgb: Tuple[float, float, float]) -> str:
    """Inverse of hex_to_rgb, channels rounded to the nearest byte."""
    return "#" + "".join(f"{round(channel * 255):02x}" for channel in rgb)
