"""Data Transfer Objects for API contracts.

These Pydantic models define the upstream GitHub payloads this service
consumes and the JSON bodies it returns.

Internal domain logic should use entities from the entities package.
"""

from .github import GitHubAsset, GitHubRelease
from .responses import AssetItem, DownloadStatsResponse, ErrorResponse, LatestReleaseSummary

__all__ = [
    "GitHubAsset",
    "GitHubRelease",
    "AssetItem",
    "LatestReleaseSummary",
    "DownloadStatsResponse",
    "ErrorResponse",
]
