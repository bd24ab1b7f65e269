"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class AssetItem(BaseModel):
    """Single asset of the latest release."""

    name: str = Field(..., description="Asset file name")
    download_count: int = Field(..., description="Downloads of this asset", ge=0)
    browser_download_url: str = Field(..., description="Direct download URL")


class LatestReleaseSummary(BaseModel):
    """Summary of the repository's latest release."""

    tag: str = Field(..., description="Tag name of the latest release")
    html_url: str = Field(..., description="Web URL of the release")
    download_count: int = Field(..., description="Downloads summed over the release's assets", ge=0)
    assets: list[AssetItem] = Field(default_factory=list)


class DownloadStatsResponse(BaseModel):
    """Response DTO for the download statistics of a repository."""

    repository: str = Field(..., description="Repository identifier, owner/repo")
    latest_release: LatestReleaseSummary
    total_downloads: int = Field(
        ...,
        description="Downloads summed over every counted release",
        ge=0,
    )
    releases_counted: int = Field(
        ...,
        description="Number of releases included in total_downloads",
        ge=0,
        le=100,
    )
    fetched_at: str = Field(..., description="ISO-8601 time the upstream data was aggregated")


class ErrorResponse(BaseModel):
    """Uniform error envelope."""

    error: str = Field(..., description="Human-readable error message")
    status: int | None = Field(None, description="Upstream HTTP status, for upstream failures")
    detail: Any | None = Field(None, description="Parsed upstream error body")
