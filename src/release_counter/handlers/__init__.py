"""Handler layer for HTTP endpoints.

Handlers depend on services (business logic), not directly on repositories,
except for the response cache which is an HTTP-level concern.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .download_handler import CORS_HEADERS, DownloadHandler

__all__ = [
    "CORS_HEADERS",
    "DownloadHandler",
]
