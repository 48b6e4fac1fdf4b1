from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from contentgen.core.config import settings

ALGORITHM = "HS256"


def create_access_token(subject: str | Any, expires_delta: timedelta | None = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"exp": expire, "sub": str(subject)}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode a bearer token; raises jwt.InvalidTokenError on a bad or expired token."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
