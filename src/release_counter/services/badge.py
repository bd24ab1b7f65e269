"""SVG badge rendering.

Badges are flat two-tone rectangles: a dark gray label box on the left and
a colored value box on the right. Text width is estimated from a fixed
average glyph width rather than measured.
"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal

from release_counter.entities import BadgeMetric, BadgeRequest

BADGE_HEIGHT = 28
BADGE_PADDING = 9
BADGE_CHAR_WIDTH = 7.5
BADGE_LABEL_COLOR = "#555"
BADGE_DEFAULT_COLOR = "#0d9488"
MAX_LABEL_LENGTH = 50

BADGE_COLOR_MAP = {
    "brightgreen": "#4c1",
    "green": "#97CA00",
    "yellow": "#dfb317",
    "yellowgreen": "#a4a61d",
    "orange": "#fe7d37",
    "red": "#e05d44",
    "blue": "#007ec6",
    "lightgrey": "#9f9f9f",
    # shields.io severity aliases
    "success": "#4c1",
    "important": "#fe7d37",
    "critical": "#e05d44",
    "informational": "#007ec6",
    "inactive": "#9f9f9f",
}

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

_XML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
}

_COUNT_SUFFIXES = ("", "K", "M", "B", "T")
_ONE_DECIMAL = Decimal("0.1")


def escape_xml(value: str) -> str:
    """Escape the five reserved XML characters."""
    return "".join(_XML_ESCAPES.get(char, char) for char in value)


def resolve_color(value: str | None) -> str:
    """Resolve a color query parameter to a hex color.

    Literal `#rgb` / `#rrggbb` values are used verbatim, known keywords are
    looked up case-insensitively, anything else gets the default teal.
    """
    if not value:
        return BADGE_DEFAULT_COLOR

    color = value.strip()
    if _HEX_COLOR.match(color):
        return color

    return BADGE_COLOR_MAP.get(color.lower(), BADGE_DEFAULT_COLOR)


def default_label(metric: BadgeMetric) -> str:
    return "latest downloads" if metric == "latest" else "total downloads"


def resolve_label(value: str | None, metric: BadgeMetric) -> str:
    """Trim and truncate an explicit label, or fall back to the metric's default."""
    if value:
        trimmed = value.strip()
        if trimmed:
            return trimmed[:MAX_LABEL_LENGTH]
    return default_label(metric)


def build_badge_request(
    metric: BadgeMetric,
    label: str | None = None,
    color: str | None = None,
) -> BadgeRequest:
    """Resolve raw query parameters into a BadgeRequest."""
    return BadgeRequest(
        metric=metric,
        label=resolve_label(label, metric),
        color=resolve_color(color),
    )


def _plain(number: Decimal) -> str:
    text = f"{number:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_count(value: float) -> str:
    """Format a download count for display.

    Values below 1000 are shown as plain numbers. Larger values use compact
    notation with at most one fractional digit (1000 -> "1K", 1250 -> "1.3K",
    2_500_000 -> "2.5M"). Non-finite input renders as "0".
    """
    if not math.isfinite(value):
        return "0"

    number = Decimal(str(value))
    if number < 1000:
        return _plain(number.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))

    magnitude = 0
    while number >= 1000 and magnitude < len(_COUNT_SUFFIXES) - 1:
        number /= 1000
        magnitude += 1

    rounded = number.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)
    # 999_950 rounds up to 1000.0K; carry into the next suffix
    if rounded >= 1000 and magnitude < len(_COUNT_SUFFIXES) - 1:
        rounded = (rounded / 1000).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)
        magnitude += 1

    return f"{_plain(rounded)}{_COUNT_SUFFIXES[magnitude]}"


def measure_text_width(text: str, padding: float = BADGE_PADDING) -> float:
    """Estimate the width of a badge box holding `text`, padding included."""
    return len(text) * BADGE_CHAR_WIDTH + padding * 2


def _num(value: float) -> str:
    return format(value, "g")


def render_badge(label: str, value: str, color: str) -> str:
    """Render a badge as an SVG document.

    Args:
        label: Left-hand text (unescaped)
        value: Right-hand text (unescaped)
        color: Resolved hex color for the value box

    Returns:
        The SVG document text
    """
    label_width = measure_text_width(label)
    value_width = measure_text_width(value)
    width = label_width + value_width
    height = BADGE_HEIGHT
    text_y = height / 2 + 4.5
    label_x = label_width / 2
    value_x = label_width + value_width / 2

    label = escape_xml(label)
    value = escape_xml(value)
    color = escape_xml(color)

    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{_num(width)}" height="{height}" '
        f'viewBox="0 0 {_num(width)} {height}" role="img" aria-label="{label}: {value}">'
        f"<title>{label}: {value}</title>"
        f'<rect width="{_num(label_width)}" height="{height}" fill="{BADGE_LABEL_COLOR}"/>'
        f'<rect x="{_num(label_width)}" width="{_num(value_width)}" height="{height}" fill="{color}"/>'
        "<g font-family=\"Lato,'DejaVu Sans',Verdana,Geneva,sans-serif\" font-size=\"12.5\" "
        'font-weight="700" text-rendering="geometricPrecision">'
        f'<text x="{_num(label_x)}" y="{_num(text_y)}" text-anchor="middle" fill="#ffffff">{label}</text>'
        f'<text x="{_num(value_x)}" y="{_num(text_y)}" text-anchor="middle" fill="#ffffff">{value}</text>'
        "</g>"
        "</svg>"
    )


def render_badge_for(request: BadgeRequest, total_downloads: int, latest_downloads: int) -> str:
    """Render the badge for the metric selected in `request`."""
    count = latest_downloads if request.metric == "latest" else total_downloads
    return render_badge(request.label, format_count(count), request.color)
