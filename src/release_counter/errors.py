"""Failure conditions raised while serving a download-count request."""

from typing import Any


class ClientInputError(Exception):
    """The request cannot be served as given (missing or malformed repository)."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UpstreamError(Exception):
    """The GitHub API answered with a non-success status.

    Attributes:
        status: The upstream HTTP status code
        detail: Best-effort parsed body of the upstream error response
    """

    def __init__(self, status: int, detail: Any) -> None:
        super().__init__(f"GitHub API responded with status {status}")
        self.status = status
        self.detail = detail

    @property
    def status_code(self) -> int:
        """HTTP status to report to the caller (502 when upstream gave none)."""
        return self.status or 502
