"""FastAPI 의존성 주입 모듈 (인증 및 권한 검사).

FastAPI dependency injection module (Authentication and authorization).

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. decode_access_token()이 서명, 만료, 유형을 검증하고 사용자 ID 반환
       (decode_access_token verifies the JWT and returns the subject)
    3. 해당 ID로 DB에서 사용자를 조회하고 활성 상태를 확인
       (User is fetched by "sub" and must be active)

Authorization:
    - require_roles(*roles): 역할 기반 검사 (Role allow-list)
    - require_assigner: 관리자 또는 팀장 (Admin or a team lead)
    - sensitive_operation(action): 민감 작업 속도 제한 (Per-user rate limit)
"""

from typing import Annotated, Awaitable, Callable
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.database import get_db
from gearguard.models.user import User
from gearguard.repositories.user_repository import user_repository
from gearguard.services.rate_limit_service import rate_limit_service
from gearguard.utils.exceptions import ForbiddenError, UnauthorizedError
from gearguard.utils.jwt import decode_access_token

# HTTP Bearer 토큰 추출기 (헤더 누락 시 직접 401 처리)
# (Missing header is reported as 401 by get_current_user)
security: HTTPBearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """JWT 토큰에서 현재 인증된 사용자를 추출합니다.

    Decode the bearer token and return the authenticated, active user.

    Raises:
        UnauthorizedError(401): 토큰 누락/무효/만료, 사용자 없음 또는 비활성
            (Missing, invalid or expired token; unknown or inactive user)
    """
    if credentials is None:
        raise UnauthorizedError("인증이 필요합니다 (Authentication required)")
    try:
        user_id: UUID = decode_access_token(credentials.credentials)
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid or expired token", code="INVALID_TOKEN")

    user: User | None = await user_repository.get_by_id(db, user_id)
    if user is None or not user.is_active:
        raise UnauthorizedError("User not found or inactive", code="INVALID_TOKEN")
    return user


def require_roles(*roles: str) -> Callable[..., Awaitable[User]]:
    """역할 기반 권한 검사 의존성 팩토리.

    Dependency factory allowing only the given roles.

    Args:
        roles: 허용 역할 (Allowed roles, e.g. "admin", "technician")

    Returns:
        FastAPI 의존성 함수 (인증된 사용자 반환 또는 403 발생)
        (Dependency returning the user or raising 403)
    """
    async def _check(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        if current_user.role not in roles:
            raise ForbiddenError("Insufficient permissions")
        return current_user
    return _check


# 편의 의존성 (Pre-configured role dependencies)
require_admin = require_roles("admin")
require_staff = require_roles("admin", "technician")


async def require_assigner(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """배정 권한: 관리자 또는 팀장만 (Admin or a team lead)."""
    if current_user.role == "admin":
        return current_user
    if await user_repository.is_team_lead(db, current_user.id):
        return current_user
    raise ForbiddenError("관리자 또는 팀장만 배정할 수 있습니다 (Only admins or team leads can assign)")


def sensitive_operation(action: str) -> Callable[..., Awaitable[User]]:
    """민감 작업 속도 제한 의존성 팩토리.

    Dependency factory recording one attempt of ``action`` for the current
    user. The hit is committed immediately so failed attempts still count.

    Raises:
        TooManyRequestsError(429): 윈도우 내 한도 초과 (Limit reached)
    """
    async def _limit(
        current_user: Annotated[User, Depends(get_current_user)],
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> User:
        await rate_limit_service.hit(db, f"{action}:{current_user.id}")
        await db.commit()
        return current_user
    return _limit
