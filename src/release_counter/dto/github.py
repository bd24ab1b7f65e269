"""DTOs for GitHub release payloads.

Only the fields this service reads are declared; everything else in the
upstream payload is ignored.
"""

from pydantic import BaseModel, ConfigDict, Field


class GitHubAsset(BaseModel):
    """A downloadable file attached to a release."""

    model_config = ConfigDict(extra="ignore")

    name: str
    download_count: int = Field(..., ge=0)
    browser_download_url: str


class GitHubRelease(BaseModel):
    """A published release as returned by the GitHub releases API."""

    model_config = ConfigDict(extra="ignore")

    id: int
    tag_name: str
    draft: bool = False
    prerelease: bool = False
    created_at: str
    published_at: str | None = None
    assets: list[GitHubAsset] = Field(default_factory=list)
    html_url: str

    @property
    def download_count(self) -> int:
        """Sum of download counts over this release's assets."""
        return sum(asset.download_count for asset in self.assets)
