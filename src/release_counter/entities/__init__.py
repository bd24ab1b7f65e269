"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services,
handlers and repositories. They are NOT used for API contracts - use
DTOs from the dto package for that.
"""

from .badge_request import BadgeMetric, BadgeRequest
from .cached_response import CachedResponse

__all__ = ["BadgeMetric", "BadgeRequest", "CachedResponse"]
