"""
Color normalisation for box and highlight colors.

Browsers report colors in several notations (``#abc``, ``rgb(...)``,
``hsl(...)``). Everything stored in the graph is normalised to ``#RRGGBB``
so exported documents compare equal after a round-trip.
"""

import colorsys
import logging
import re

from treenotes.constants import DEFAULT_BOX_COLOR

logger = logging.getLogger(__name__)

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_RGB_RE = re.compile(r"^rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*[\d.]+\s*)?\)$")
_HSL_RE = re.compile(r"^hsla?\(\s*(\d+(?:\.\d+)?)\s*,\s*(\d+(?:\.\d+)?)%\s*,\s*(\d+(?:\.\d+)?)%\s*(?:,\s*[\d.]+\s*)?\)$")


def _clamp_channel(value: int) -> int:
    return max(0, min(255, value))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Convert 0-255 channel values to an uppercase ``#RRGGBB`` string."""
    return "#{:02X}{:02X}{:02X}".format(_clamp_channel(r), _clamp_channel(g), _clamp_channel(b))


def hsl_to_hex(h: float, s: float, l: float) -> str:
    """
    Convert HSL (hue in degrees, saturation and lightness in percent) to hex.

    colorsys works in HLS order with all components in [0, 1].
    """
    hue = (h % 360) / 360.0
    r, g, b = colorsys.hls_to_rgb(hue, min(l, 100) / 100.0, min(s, 100) / 100.0)
    # Round half up so 127.5 becomes 128 like the browser does
    return rgb_to_hex(int(r * 255 + 0.5), int(g * 255 + 0.5), int(b * 255 + 0.5))


def color_to_hex(color, default: str = DEFAULT_BOX_COLOR) -> str:
    """
    Normalise a color string to ``#RRGGBB``.

    Accepts hex (3 or 6 digits), ``rgb()``/``rgba()`` and ``hsl()``/``hsla()``.
    Alpha is dropped. Anything else returns ``default``.
    """
    if not isinstance(color, str):
        return default

    normalized = color.strip()
    if not normalized:
        return default

    match = _HEX_RE.match(normalized)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return "#" + digits.upper()

    match = _RGB_RE.match(normalized.lower())
    if match:
        return rgb_to_hex(*(int(part) for part in match.groups()))

    match = _HSL_RE.match(normalized.lower())
    if match:
        return hsl_to_hex(*(float(part) for part in match.groups()))

    logger.warning(f"Invalid color {color!r}, using {default}")
    return default
