"""Theme colors and color utilities for the UI."""

from typing import Optional, Tuple

from vegam.core.ledger import CharState


class PaletteColors:
    """Light theme palette."""

    BG_TOP = "#e0f7fa"
    BG_BOTTOM = "#b2ebf2"

    PRIMARY = "#00838f"
    PRIMARY_LIGHT = "#4fb3bf"
    PRIMARY_DARK = "#005662"

    SUCCESS = "#2e7d32"
    ERROR = "#c62828"
    ERROR_BG = "#ffebee"
    AMBER = "#ffb74d"

    CARD_BG = "rgba(255, 255, 255, 0.85)"

    TEXT_PRIMARY = "#1a3a3a"
    TEXT_SECONDARY = "#4a6572"
    TEXT_MUTED = "#78909c"


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    try:
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
    except ValueError:
        return a
    t = max(0.0, min(1.0, float(t)))
    r = int(ar + (br - ar) * t)
    g = int(ag + (bg - ag) * t)
    bl = int(ab + (bb - ab) * t)
    return f"#{r:02X}{g:02X}{bl:02X}"


# Corrected characters sit between "correct" green and a warning amber.
CORRECTED = blend_hex(PaletteColors.SUCCESS, PaletteColors.AMBER, 0.6)

STATE_COLORS = {
    CharState.UNTYPED: PaletteColors.TEXT_MUTED,
    CharState.CORRECT: PaletteColors.SUCCESS,
    CharState.INCORRECT: PaletteColors.ERROR,
    CharState.CORRECTED: CORRECTED,
}


def unit_colors(state: CharState, is_current: bool) -> Tuple[str, Optional[str]]:
    """Return ``(foreground, background)`` for a passage unit.

    Only the current unit and incorrect units get a background.
    """
    if is_current:
        return PaletteColors.PRIMARY_DARK, blend_hex(PaletteColors.BG_TOP, PaletteColors.PRIMARY_LIGHT, 0.35)
    if state is CharState.INCORRECT:
        return PaletteColors.ERROR, PaletteColors.ERROR_BG
    return STATE_COLORS[state], None
