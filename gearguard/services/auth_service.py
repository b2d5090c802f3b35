"""인증 서비스 (로그인 및 비밀번호 변경 비즈니스 로직).

Auth Service (Business logic for login and password changes).
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.models.user import User
from gearguard.repositories.user_repository import user_repository
from gearguard.schemas.auth import LoginRequest, TokenResponse
from gearguard.services.user_service import user_service
from gearguard.utils.exceptions import BadRequestError, ForbiddenError, UnauthorizedError
from gearguard.utils.jwt import create_access_token
from gearguard.utils.password import burn_password_check, hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스."""

    async def login(self, db: AsyncSession, data: LoginRequest) -> TokenResponse:
        """이메일/비밀번호 로그인을 처리합니다.

        Authenticate with e-mail and password.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 로그인 요청 (Login credentials)

        Returns:
            TokenResponse: 액세스 토큰과 사용자 정보 (Access token and profile)

        Raises:
            UnauthorizedError: 이메일 또는 비밀번호 불일치 (Invalid credentials)
            ForbiddenError: 활성 상태가 아닌 계정 (Account not active)
        """
        user: User | None = await user_repository.get_by_email(db, data.email)
        if user is None:
            burn_password_check(data.password)
        if user is None or not verify_password(data.password, user.password_hash):
            logger.info("Failed login for %s", data.email.strip().lower())
            raise UnauthorizedError(
                "이메일 또는 비밀번호가 올바르지 않습니다 (Invalid email or password)",
                code="INVALID_CREDENTIALS",
            )
        if not user.is_active:
            raise ForbiddenError(
                "활성화되지 않은 계정입니다 (Account is not active)",
                code="ACCOUNT_INACTIVE",
            )

        user.last_login = datetime.now(timezone.utc)
        await db.flush()

        token: str = create_access_token(user.id, user.role)
        return TokenResponse(access_token=token, user=user_service.build_response(user))

    async def change_password(
        self,
        db: AsyncSession,
        user: User,
        current_password: str,
        new_password: str,
    ) -> None:
        if not verify_password(current_password, user.password_hash):
            raise BadRequestError(
                "현재 비밀번호가 올바르지 않습니다 (Current password is incorrect)",
                code="INVALID_PASSWORD",
            )
        user.password_hash = hash_password(new_password)
        await db.flush()


auth_service: AuthService = AuthService()
