"""
Access tokens issued by the commercetools authorization server.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

# Lifetime in seconds assumed when a token response omits ``expires_in``
DEFAULT_EXPIRES_IN = 900


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Token:
    """An OAuth2 access token and the moment it was issued.

    Tokens are never mutated.  When a token expires the client
    replaces it with a freshly fetched one.
    """

    access_token: str
    token_type: str
    expires_in: int
    issued_at: datetime = field(default_factory=_utcnow)
    refresh_token: Optional[str] = None
    scope: Optional[str] = None

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "Token":
        """Build a token from the JSON body of a token endpoint response.

        A missing or null ``expires_in`` falls back to
        :data:`DEFAULT_EXPIRES_IN` seconds.

        Raises
        ------
        KeyError
            If ``access_token`` is missing.
        TypeError, ValueError
            If the payload is not an object or ``expires_in`` is not a
            number.
        """
        if not isinstance(data, dict):
            raise TypeError(f"expected a JSON object, got {type(data).__name__}")
        expires_in = data.get("expires_in")
        if expires_in is None:
            expires_in = DEFAULT_EXPIRES_IN
        return cls(
            access_token=data["access_token"],
            token_type=data.get("token_type", "Bearer"),
            expires_in=int(expires_in),
            refresh_token=data.get("refresh_token"),
            scope=data.get("scope"),
        )

    @property
    def expires_at(self) -> datetime:
        return self.issued_at + timedelta(seconds=self.expires_in)

    def is_expired(self, now: Optional[datetime] = None, margin: float = 0.0) -> bool:
        """Return ``True`` once ``now`` has reached the expiry time.

        ``margin`` (seconds) moves the expiry time earlier.
        """
        now = now or _utcnow()
        return now >= self.expires_at - timedelta(seconds=margin)

    def __repr__(self) -> str:
        return (
            f"Token(token_type={self.token_type!r}, expires_in={self.expires_in!r}, "
            f"issued_at={self.issued_at.isoformat()!r})"
        )


def is_token_valid(
    token: Optional[Token],
    now: Optional[datetime] = None,
    margin: float = 0.0,
) -> bool:
    """Client side check of whether ``token`` can still be used.

    Returns ``False`` when there is no token or it has expired.  A
    token reported as valid may still expire before the request that
    uses it reaches the server unless a ``margin`` is given.
    """
    if token is None:
        return False
    return not token.is_expired(now, margin)
