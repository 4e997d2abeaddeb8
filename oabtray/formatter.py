"""Status line formatting. Everything here is pure."""

import math

from .models import PriceSnapshot, normalize_sensitivity

CURRENCY_SYMBOL = '₿'
UP_INDICATOR = '🟢'
DOWN_INDICATOR = '🔴'
FLAT_INDICATOR = '⚪'
UP_GLYPH = '🚀'
DOWN_GLYPH = '🧂'

SCREEN_WIDTH = 20
ERROR_TEXT = 'TECHNICAL DIFFICULTIES :)'


def get_indicator(change_percent: float) -> str:
    if change_percent > 0:
        return UP_INDICATOR
    if change_percent < 0:
        return DOWN_INDICATOR
    return FLAT_INDICATOR


def get_glyph_count(change_percent: float, sensitivity_factor: float) -> int:
    """One glyph per whole multiple of the sensitivity factor"""
    factor = normalize_sensitivity(sensitivity_factor)
    return int(math.floor(abs(change_percent) / factor))


def get_glyphs(change_percent: float, sensitivity_factor: float) -> str:
    glyph = UP_GLYPH if change_percent >= 0 else DOWN_GLYPH
    return glyph * get_glyph_count(change_percent, sensitivity_factor)


def format_price(price: float, abbreviated: bool = False) -> str:
    if abbreviated:
        return f"{price / 1_000_000:.3f}M"
    return f"{price:,.2f}"


def format_price_string(price: float, change_percent: float,
                        sensitivity_factor: float, abbreviated: bool = False) -> str:
    """Build the tray line, e.g. '₿ 🟢 $50,000.00 (+6.00%) 🚀🚀'"""
    line = (f"{CURRENCY_SYMBOL} {get_indicator(change_percent)} "
            f"${format_price(price, abbreviated)} ({change_percent:+.2f}%)")
    glyphs = get_glyphs(change_percent, sensitivity_factor)
    if glyphs:
        line = f"{line} {glyphs}"
    return line


def fit_to_width(text: str, width: int = SCREEN_WIDTH) -> str:
    """Pad or truncate text to exactly width characters"""
    return f"{text:<{width}}"[:width]


def format_error(width: int = SCREEN_WIDTH) -> str:
    return f"{ERROR_TEXT:<{width}}"


def format_tooltip(snapshot: PriceSnapshot) -> str:
    """Full-detail tooltip for the tray icon"""
    if snapshot.is_empty:
        return "Bitcoin Price Tracker"
    line = f"BTC ${format_price(snapshot.price)} ({snapshot.change_percent:+.2f}% 24h)"
    if snapshot.observed_at is not None:
        line += f"\nLast updated: {snapshot.observed_at.strftime('%Y-%m-%d %H:%M:%S')}"
    return line
