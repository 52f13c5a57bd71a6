"""Colour conversions and CIEDE2000 perceptual distance.

hex → sRGB (0-255) → linear RGB → XYZ (D65) → CIELAB → ΔE00.

The ΔE00 implementation is the full Sharma et al. (2005) formula with
kL = kC = kH = 1: G-factor chroma compensation, hue wrap-around at ±180°,
mean-hue adjustment, S_L / S_C / S_H weights and the blue-region rotation
term R_T.

Malformed colour strings raise ColorParseError.
"""

from __future__ import annotations

import math
import re

from saccadic.core.errors import ColorParseError
from saccadic.core.thresholds import DEFAULT_THRESHOLDS, Thresholds
from saccadic.core.types import Severity

RGB = tuple[int, int, int]
Lab = tuple[float, float, float]

_HEX_RE = re.compile(r'^[0-9a-fA-F]+$')
_RGB_FUNC_RE = re.compile(r'rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)')

# D65 reference white
_XN, _YN, _ZN = 0.95047, 1.0, 1.08883

_POW25_7 = 25.0**7


def hex_to_rgb(hex_str: str) -> RGB:
    """Parse '#RGB', '#RRGGBB' or '#RRGGBBAA' (leading '#' optional, any case). Alpha is ignored."""
    h = hex_str.strip()
    if h.startswith('#'):
        h = h[1:]
    if len(h) == 3:
        h = ''.join(c * 2 for c in h)
    if len(h) not in (6, 8) or not _HEX_RE.match(h):
        raise ColorParseError(f'Invalid hex colour: {hex_str!r}')
    return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Uppercase '#RRGGBB'."""
    return f'#{r:02X}{g:02X}{b:02X}'


def parse_color_to_hex(value: str | None) -> str | None:
    """Normalise '#hex', 'rgb(r, g, b)' or 'rgba(r, g, b, a)' to uppercase hex.

    Returns None for empty input. Anything else non-empty raises.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if value.startswith('#'):
        return rgb_to_hex(*hex_to_rgb(value))
    m = _RGB_FUNC_RE.match(value)
    if m:
        r, g, b = (round(float(m.group(i))) for i in (1, 2, 3))
        return rgb_to_hex(r, g, b)
    raise ColorParseError(f'Unrecognised colour value: {value!r}')


def _to_linear(channel: int) -> float:
    c = channel / 255.0
    return c / 12.92 if c <= 0.04045 else ((c + 0.055) / 1.055) ** 2.4


def _lab_f(t: float) -> float:
    return t ** (1.0 / 3.0) if t > 0.008856 else 7.787 * t + 16.0 / 116.0


def rgb_to_lab(rgb: RGB) -> Lab:
    r, g, b = (_to_linear(c) for c in rgb)

    x = r * 0.4124564 + g * 0.3575761 + b * 0.1804375
    y = r * 0.2126729 + g * 0.7151522 + b * 0.0721750
    z = r * 0.0193339 + g * 0.1191920 + b * 0.9503041

    fx = _lab_f(x / _XN)
    fy = _lab_f(y / _YN)
    fz = _lab_f(z / _ZN)

    return (116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz))


def _hue_degrees(a_prime: float, b: float) -> float:
    if a_prime == 0 and b == 0:
        return 0.0
    h = math.degrees(math.atan2(b, a_prime))
    return h + 360.0 if h < 0 else h


def ciede2000(lab1: Lab, lab2: Lab) -> float:
    """ΔE00 between two CIELAB colours."""
    l1, a1, b1 = lab1
    l2, a2, b2 = lab2

    l_mean = (l1 + l2) / 2.0

    c1 = math.hypot(a1, b1)
    c2 = math.hypot(a2, b2)
    c_mean7 = ((c1 + c2) / 2.0) ** 7
    g = 0.5 * (1.0 - math.sqrt(c_mean7 / (c_mean7 + _POW25_7)))

    a1p = a1 * (1.0 + g)
    a2p = a2 * (1.0 + g)
    c1p = math.hypot(a1p, b1)
    c2p = math.hypot(a2p, b2)
    cp_mean = (c1p + c2p) / 2.0

    h1p = _hue_degrees(a1p, b1)
    h2p = _hue_degrees(a2p, b2)

    chroma_product = c1p * c2p

    dhp = 0.0
    hp_mean = h1p + h2p
    if chroma_product != 0:
        dhp = h2p - h1p
        if dhp > 180:
            dhp -= 360
        elif dhp < -180:
            dhp += 360

        hp_mean = (h1p + h2p) / 2.0
        if abs(h1p - h2p) > 180:
            hp_mean += 180 if hp_mean < 180 else -180

    d_l = l2 - l1
    d_c = c2p - c1p
    d_h = 2.0 * math.sqrt(chroma_product) * math.sin(math.radians(dhp / 2.0))

    t = (
        1.0
        - 0.17 * math.cos(math.radians(hp_mean - 30))
        + 0.24 * math.cos(math.radians(2 * hp_mean))
        + 0.32 * math.cos(math.radians(3 * hp_mean + 6))
        - 0.20 * math.cos(math.radians(4 * hp_mean - 63))
    )

    l_off2 = (l_mean - 50.0) ** 2
    s_l = 1.0 + (0.015 * l_off2) / math.sqrt(20.0 + l_off2)
    s_c = 1.0 + 0.045 * cp_mean
    s_h = 1.0 + 0.015 * cp_mean * t

    d_theta = 30.0 * math.exp(-(((hp_mean - 275.0) / 25.0) ** 2))
    cp_mean7 = cp_mean**7
    r_c = 2.0 * math.sqrt(cp_mean7 / (cp_mean7 + _POW25_7))
    r_t = -r_c * math.sin(math.radians(2.0 * d_theta))

    tl = d_l / s_l
    tc = d_c / s_c
    th = d_h / s_h
    return math.sqrt(max(0.0, tl * tl + tc * tc + th * th + r_t * tc * th))


def delta_e(color_a: str, color_b: str) -> float:
    """ΔE00 between two hex colours."""
    return ciede2000(rgb_to_lab(hex_to_rgb(color_a)), rgb_to_lab(hex_to_rgb(color_b)))


def severity_from_delta_e(value: float, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> Severity:
    return thresholds.color_severity(value)


def colors_match(expected: str, actual: str, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> bool:
    """Perceptual equality: ΔE00 below the colour pass threshold."""
    if expected.strip().upper() == actual.strip().upper():
        hex_to_rgb(expected)
        return True
    return delta_e(expected, actual) < thresholds.color.pass_below
