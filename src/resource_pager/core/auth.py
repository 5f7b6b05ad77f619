"""Access tokens for the resource API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

__all__ = ["AccessToken"]


@dataclass(frozen=True, slots=True)
class AccessToken:
    """Bearer token together with the moment it stops being accepted."""

    token: str
    expires_at: datetime

    @classmethod
    def issued_now(cls, token: str, expiration_minutes: int) -> "AccessToken":
        expires_at = datetime.now(timezone.utc) + timedelta(minutes=expiration_minutes)
        return cls(token=token.strip(), expires_at=expires_at)

    def is_valid(self, now: datetime | None = None) -> bool:
        current = now or datetime.now(timezone.utc)
        return bool(self.token) and current < self.expires_at

    def auth_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}
