# File: site_harvest/theme/colors.py
"""site_harvest.theme.colors: colour parsing, normalisation and the brand-colour filter.

>>> normalize_color('#0F0')
'#00ff00'
>>> normalize_color('rgb(229, 9, 20)')
'#e50914'
>>> is_valid_brand_color('#e50914')
True
>>> is_valid_brand_color('#333333')
False
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

RGB = Tuple[int, int, int]

_HEX6_RE = re.compile(r"#[0-9a-f]{6}")
_HEX3_RE = re.compile(r"#[0-9a-f]{3}")
_RGB_RE = re.compile(r"rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})(?:\s*,\s*[\d.]+%?)?\s*\)")

_GENERIC_LITERALS = frozenset(
    {
        "transparent",
        "inherit",
        "initial",
        "unset",
        "none",
        "currentcolor",
        "white",
        "black",
        "#fff",
        "#ffffff",
        "#000",
        "#000000",
        "rgba(0,0,0,0)",
        "rgba(255,255,255,0)",
    }
)

MAX_BRIGHTNESS = 240
MIN_BRIGHTNESS = 20
MIN_CHANNEL_RANGE = 15
MIN_VIBRANCE = 15


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return "#{:02x}{:02x}{:02x}".format(*(max(0, min(255, c)) for c in (r, g, b)))


def normalize_color(value: Optional[str]) -> Optional[str]:
    """Lowercase 6-digit hex form of a hex or ``rgb()``/``rgba()`` colour, else None."""
    if not value:
        return None
    color = value.strip().strip("'\"").strip().lower()
    if _HEX6_RE.fullmatch(color):
        return color
    if _HEX3_RE.fullmatch(color):
        return "#" + "".join(ch * 2 for ch in color[1:])
    m = _RGB_RE.fullmatch(color)
    if m:
        return rgb_to_hex(*(int(m.group(i)) for i in range(1, 4)))
    return None


def hex_to_rgb(color: str) -> RGB:
    return int(color[1:3], 16), int(color[3:5], 16), int(color[5:7], 16)


def brightness(rgb: RGB) -> float:
    """Perceptual luma ``0.299R + 0.587G + 0.114B``."""
    r, g, b = rgb
    return 0.299 * r + 0.587 * g + 0.114 * b


def channel_range(rgb: RGB) -> int:
    return max(rgb) - min(rgb)


def vibrance(color: str) -> float:
    """Saturation (0–100) halved for very bright or very dark colours."""
    normalized = normalize_color(color)
    if normalized is None:
        return 0.0
    rgb = hex_to_rgb(normalized)
    high = max(rgb)
    saturation = 0.0 if high == 0 else (high - min(rgb)) / high * 100
    average = sum(rgb) / 3
    factor = 0.5 if average > 200 or average < 50 else 1.0
    return saturation * factor


def is_valid_brand_color(color: Optional[str]) -> bool:
    """Whether *color* could plausibly be a brand colour.

    Rejects generic literals (white, black, transparent, inherit, ...),
    near-white and near-black colours, near-grayscale colours and colours
    that are not vibrant enough.
    """
    if not color or not isinstance(color, str):
        return False
    if re.sub(r"\s+", "", color.lower()) in _GENERIC_LITERALS:
        return False
    normalized = normalize_color(color)
    if normalized is None:
        return False
    rgb = hex_to_rgb(normalized)
    luma = brightness(rgb)
    if luma > MAX_BRIGHTNESS or luma < MIN_BRIGHTNESS:
        return False
    if channel_range(rgb) < MIN_CHANNEL_RANGE:
        return False
    return vibrance(normalized) >= MIN_VIBRANCE
