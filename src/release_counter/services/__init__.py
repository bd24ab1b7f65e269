"""Service layer for business logic.

Services depend on protocols (interfaces), not concrete implementations.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .badge import build_badge_request, format_count, render_badge, render_badge_for, resolve_color, resolve_label
from .download_service import DownloadService, aggregate, resolve_repository, split_repository, sum_downloads

__all__ = [
    "DownloadService",
    "aggregate",
    "build_badge_request",
    "format_count",
    "render_badge",
    "render_badge_for",
    "resolve_color",
    "resolve_label",
    "resolve_repository",
    "split_repository",
    "sum_downloads",
]
