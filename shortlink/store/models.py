"""Data models for short links."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LinkRecord:
    """Represents a token to URL mapping held by the link store."""

    token: str
    original_url: str
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "token": self.token,
            "original_url": self.original_url,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class ShortLink:
    """Result of a successful shorten request."""

    token: str
    original_url: str
    short_url: str
    port: int
    created_at: datetime

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "token": self.token,
            "original_url": self.original_url,
            "short_url": self.short_url,
            "port": self.port,
            "created_at": self.created_at.isoformat(),
        }
