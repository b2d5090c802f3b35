"""액세스 토큰 발급/검증 유틸리티.

Access token helpers. Tokens identify a user and carry the role it had at
issue time; the role is informational only, permissions are always checked
against the stored user.

Payload::

    {"sub": "<user uuid>", "role": "technician", "type": "access",
     "iat": <issued at>, "exp": <expiry>}
"""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import jwt

from gearguard.config import settings

TOKEN_TYPE: str = "access"


def create_access_token(user_id: UUID | str, role: str, now: datetime | None = None) -> str:
    """사용자 액세스 토큰 발급 (Issue an access token for a user)."""
    issued: datetime = now or datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "role": role,
        "type": TOKEN_TYPE,
        "iat": issued,
        "exp": issued + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> UUID:
    """액세스 토큰을 검증하고 사용자 ID를 반환합니다.

    Verify signature, expiry and token type, and return the subject.

    Raises:
        jwt.InvalidTokenError: 서명/만료/유형 오류 또는 잘못된 sub
            (Bad signature, expired, wrong type or malformed subject)
    """
    payload: dict[str, Any] = jwt.decode(
        token,
        settings.JWT_SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["sub", "exp"]},
    )
    if payload.get("type") != TOKEN_TYPE:
        raise jwt.InvalidTokenError("not an access token")
    try:
        return UUID(payload["sub"])
    except ValueError as exc:
        raise jwt.InvalidTokenError("malformed subject") from exc
