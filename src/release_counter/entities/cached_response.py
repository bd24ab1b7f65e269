"""Cached HTTP response domain entity."""

import json
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CachedResponse:
    """An HTTP response as stored in the response cache.

    Attributes:
        status_code: HTTP status of the stored response
        body: Response body text (JSON or SVG)
        headers: Response headers, in the order they were sent
    """

    status_code: int
    body: str
    headers: dict[str, str] = field(default_factory=dict)

    def to_json(self) -> str:
        """Serialize for storage."""
        return json.dumps(
            {"status_code": self.status_code, "headers": self.headers, "body": self.body}
        )

    @classmethod
    def from_json(cls, raw: str | bytes) -> "CachedResponse":
        """Rebuild an entry previously produced by to_json()."""
        data = json.loads(raw)
        return cls(
            status_code=int(data["status_code"]),
            body=data["body"],
            headers=dict(data.get("headers") or {}),
        )
