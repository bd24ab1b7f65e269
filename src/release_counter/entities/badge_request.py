"""Badge request domain entity."""

from dataclasses import dataclass
from typing import Literal

BadgeMetric = Literal["total", "latest"]


@dataclass(frozen=True)
class BadgeRequest:
    """Resolved parameters for rendering a badge.

    Attributes:
        metric: Which download count the badge shows
        label: Text in the left (gray) box, at most 50 characters
        color: Hex color of the right (value) box
    """

    metric: BadgeMetric
    label: str
    color: str
