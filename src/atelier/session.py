"""Signed session tokens.

A token asserts a member identity and the moment it was issued. It is a
JWT signed with the server secret, so clients cannot mint or alter one.
Decoding does not check age; callers compare the issue time against
:data:`SESSION_TTL` themselves (see :meth:`SessionToken.is_expired`).
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt


SESSION_TTL = timedelta(hours=24)


class DecodeError(ValueError):
    """Raised when a token is malformed, tampered with or incomplete."""


@dataclass(frozen=True)
class SessionToken:
    member_id: str
    issued_at: datetime

    @property
    def expires_at(self) -> datetime:
        return self.issued_at + SESSION_TTL

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now - self.issued_at > SESSION_TTL


class SessionCodec:
    """Encode and decode session tokens with a shared HMAC secret."""

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm

    def encode(self, member_id: str, issued_at: datetime | None = None) -> str:
        """Return a token for ``member_id`` issued at ``issued_at`` (default: now).

        The issue time is stored in whole seconds.
        """
        issued_at = issued_at or datetime.now(timezone.utc)
        payload = {"sub": member_id, "iat": int(_as_utc(issued_at).timestamp())}
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> SessionToken:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "iat"]},
            )
        except jwt.PyJWTError as exc:
            raise DecodeError(str(exc)) from exc

        member_id = payload["sub"]
        if not isinstance(member_id, str) or not member_id:
            raise DecodeError("token subject must be a member id")
        return SessionToken(
            member_id=member_id,
            issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
        )


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
