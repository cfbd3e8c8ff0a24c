from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from push_api.core.config import settings


@dataclass
class TokenPayload:
    subject: str
    expires_at: datetime


class TokenDecodeError(RuntimeError):
    pass


def create_access_token(subject: str, expires_delta: timedelta | None = None) -> str:
    """
    Issue a bearer token for a recipient. Login lives elsewhere; this is used by tooling and tests.
    """
    now = datetime.now(timezone.utc)
    expires = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    payload: dict[str, Any] = {
        "sub": subject,
        "exp": int(expires.timestamp()),
        "iat": int(now.timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenPayload:
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:  # noqa: PERF203 - explicit conversion needed
        raise TokenDecodeError("Token verification failed.") from exc

    subject = payload.get("sub")
    exp = payload.get("exp")
    if not subject or exp is None:
        raise TokenDecodeError("Token payload is incomplete.")

    expires_at = datetime.fromtimestamp(int(exp), tz=timezone.utc)
    return TokenPayload(subject=str(subject), expires_at=expires_at)
