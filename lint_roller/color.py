"""Color conversion and perceptual distance (CIEDE2000).

Hex strings are lowercase, 6 digits for opaque colors and 8 digits when an
alpha below 1 is present. Perceptual comparisons ignore alpha.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass

from .document.models import RGBA
from .matching.models import ConfidenceTier

# D65 reference white
REF_X = 95.047
REF_Y = 100.0
REF_Z = 108.883

_EPSILON = 0.008856
_KAPPA = 903.3


@dataclass(frozen=True)
class LAB:
    """CIELAB color."""

    L: float
    a: float
    b: float


@dataclass
class ColorMatch:
    """A candidate color token for a target color."""

    token_path: str
    token_hex: str
    delta_e: float
    is_exact: bool

    def to_dict(self) -> dict:
        return {
            "tokenPath": self.token_path,
            "tokenHex": self.token_hex,
            "deltaE": round(self.delta_e, 2),
            "isExact": self.is_exact,
        }


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values, like channel quantization."""
    return int(math.floor(value + 0.5))


def rgb_to_hex(color: RGBA) -> str:
    """Convert 0..1 RGBA to hex, appending alpha only when it is below 1.

    Example:
        >>> rgb_to_hex(RGBA(1, 1, 1))
        '#ffffff'
        >>> rgb_to_hex(RGBA(1, 1, 1, 0.5))
        '#ffffff80'
    """
    channels = [color.r, color.g, color.b]
    if color.a < 1:
        channels.append(color.a)
    return "#" + "".join(f"{round_half_up(c * 255):02x}" for c in channels)


def _expand_hex(hex_color: str) -> str | None:
    cleaned = hex_color.strip().lstrip("#").lower()
    if len(cleaned) == 3:
        cleaned = "".join(c + c for c in cleaned)
    if len(cleaned) not in (6, 8):
        return None
    try:
        int(cleaned, 16)
    except ValueError:
        return None
    return cleaned


def hex_to_rgba(hex_color: str) -> RGBA | None:
    """Parse 3, 6 or 8 digit hex into 0..1 RGBA, None when invalid."""
    expanded = _expand_hex(hex_color)
    if expanded is None:
        return None
    r, g, b = (int(expanded[i : i + 2], 16) / 255 for i in (0, 2, 4))
    a = int(expanded[6:8], 16) / 255 if len(expanded) == 8 else 1.0
    return RGBA(r, g, b, a)


def hex_to_rgb(hex_color: str) -> tuple[int, int, int] | None:
    """Parse hex into 0..255 channels, dropping any alpha."""
    expanded = _expand_hex(hex_color)
    if expanded is None:
        return None
    return (
        int(expanded[0:2], 16),
        int(expanded[2:4], 16),
        int(expanded[4:6], 16),
    )


def composite_on_white(hex_color: str) -> str:
    """Flatten an 8-digit hex color onto a white background.

    Colors without an alpha byte are returned lowercased and otherwise as is.
    """
    cleaned = hex_color.strip().lstrip("#").lower()
    if len(cleaned) != 8:
        return "#" + cleaned

    alpha = int(cleaned[6:8], 16) / 255
    channels = (int(cleaned[i : i + 2], 16) for i in (0, 2, 4))
    composited = (round_half_up(c * alpha + 255 * (1 - alpha)) for c in channels)
    return "#" + "".join(f"{c:02x}" for c in composited)


def _linearize(channel: float) -> float:
    if channel > 0.04045:
        return ((channel + 0.055) / 1.055) ** 2.4
    return channel / 12.92


def rgb_to_xyz(rgb: tuple[int, int, int]) -> tuple[float, float, float]:
    """sRGB (0..255) to CIE XYZ scaled to 0..100."""
    r, g, b = (_linearize(c / 255) * 100 for c in rgb)
    return (
        r * 0.4124564 + g * 0.3575761 + b * 0.1804375,
        r * 0.2126729 + g * 0.7151522 + b * 0.0721750,
        r * 0.0193339 + g * 0.1191920 + b * 0.9503041,
    )


def xyz_to_lab(xyz: tuple[float, float, float]) -> LAB:
    def pivot(t: float) -> float:
        return t ** (1 / 3) if t > _EPSILON else (_KAPPA * t + 16) / 116

    x = pivot(xyz[0] / REF_X)
    y = pivot(xyz[1] / REF_Y)
    z = pivot(xyz[2] / REF_Z)
    return LAB(L=116 * y - 16, a=500 * (x - y), b=200 * (y - z))


def hex_to_lab(hex_color: str) -> LAB | None:
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        return None
    return xyz_to_lab(rgb_to_xyz(rgb))


def _hue_degrees(a_prime: float, b: float) -> float:
    if a_prime == 0 and b == 0:
        return 0.0
    h = math.degrees(math.atan2(b, a_prime))
    return h + 360 if h < 0 else h


def delta_e_2000(lab1: LAB, lab2: LAB) -> float:
    """CIEDE2000 color difference with unit weighting factors."""
    c1 = math.hypot(lab1.a, lab1.b)
    c2 = math.hypot(lab2.a, lab2.b)
    c_avg = (c1 + c2) / 2
    g = 0.5 * (1 - math.sqrt(c_avg**7 / (c_avg**7 + 25**7)))

    a1p = lab1.a * (1 + g)
    a2p = lab2.a * (1 + g)
    c1p = math.hypot(a1p, lab1.b)
    c2p = math.hypot(a2p, lab2.b)
    h1p = _hue_degrees(a1p, lab1.b)
    h2p = _hue_degrees(a2p, lab2.b)

    delta_lp = lab2.L - lab1.L
    delta_cp = c2p - c1p

    if c1p * c2p == 0:
        delta_hp = 0.0
    else:
        dh = h2p - h1p
        if abs(dh) > 180:
            dh += 360 if h2p <= h1p else -360
        delta_hp = 2 * math.sqrt(c1p * c2p) * math.sin(math.radians(dh / 2))

    lp_avg = (lab1.L + lab2.L) / 2
    cp_avg = (c1p + c2p) / 2

    if c1p * c2p == 0:
        hp_avg = h1p + h2p
    elif abs(h1p - h2p) <= 180:
        hp_avg = (h1p + h2p) / 2
    elif h1p + h2p < 360:
        hp_avg = (h1p + h2p + 360) / 2
    else:
        hp_avg = (h1p + h2p - 360) / 2

    t = (
        1
        - 0.17 * math.cos(math.radians(hp_avg - 30))
        + 0.24 * math.cos(math.radians(2 * hp_avg))
        + 0.32 * math.cos(math.radians(3 * hp_avg + 6))
        - 0.20 * math.cos(math.radians(4 * hp_avg - 63))
    )
    delta_theta = 30 * math.exp(-(((hp_avg - 275) / 25) ** 2))
    rc = 2 * math.sqrt(cp_avg**7 / (cp_avg**7 + 25**7))
    sl = 1 + (0.015 * (lp_avg - 50) ** 2) / math.sqrt(20 + (lp_avg - 50) ** 2)
    sc = 1 + 0.045 * cp_avg
    sh = 1 + 0.015 * cp_avg * t
    rt = -math.sin(math.radians(2 * delta_theta)) * rc

    return math.sqrt(
        (delta_lp / sl) ** 2
        + (delta_cp / sc) ** 2
        + (delta_hp / sh) ** 2
        + rt * (delta_cp / sc) * (delta_hp / sh)
    )


def find_closest_colors(
    target_hex: str,
    color_values: Mapping[str, str],
    color_lab: Mapping[str, LAB] | None = None,
    max_results: int = 5,
    max_delta_e: float = 10.0,
) -> list[ColorMatch]:
    """Find color tokens perceptually close to a target.

    Args:
        target_hex: Color to match; an alpha byte is ignored.
        color_values: hex -> token path.
        color_lab: Optional precomputed hex -> LAB cache.
        max_results: Result cap.
        max_delta_e: Largest CIEDE2000 distance to include.

    Returns:
        Exact matches first, then ascending delta E.
    """
    target_lab = hex_to_lab(target_hex)
    if target_lab is None:
        return []

    normalized_target = target_hex.lower()
    matches: list[ColorMatch] = []

    for hex_color, token_path in color_values.items():
        normalized_hex = hex_color.lower()
        if normalized_hex in (normalized_target, normalized_target[:7]):
            matches.append(ColorMatch(token_path, hex_color, 0.0, True))
            continue

        token_lab = color_lab.get(hex_color) if color_lab else None
        if token_lab is None:
            token_lab = hex_to_lab(hex_color)
        if token_lab is None:
            continue

        distance = delta_e_2000(target_lab, token_lab)
        if distance <= max_delta_e:
            matches.append(ColorMatch(token_path, hex_color, distance, False))

    matches.sort(key=lambda m: (not m.is_exact, m.delta_e))
    return matches[:max_results]


def delta_e_description(delta_e: float) -> str:
    """Human-readable description of a CIEDE2000 distance."""
    if delta_e == 0:
        return "exact match"
    if delta_e < 1:
        return "visually identical"
    if delta_e < 2:
        return "barely perceptible difference"
    if delta_e < 5:
        return "slight difference"
    if delta_e < 10:
        return "noticeable difference"
    return "significant difference"


def confidence_for_delta_e(delta_e: float, has_alpha: bool = False) -> ConfidenceTier:
    """Confidence tier for a color suggestion.

    A translucent source is never better than approximate because the match
    ignores alpha.
    """
    if delta_e == 0:
        tier = ConfidenceTier.EXACT
    elif delta_e < 2:
        tier = ConfidenceTier.CLOSE
    else:
        tier = ConfidenceTier.APPROXIMATE
    if has_alpha:
        return ConfidenceTier.APPROXIMATE
    return tier
