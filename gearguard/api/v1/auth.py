"""인증 라우터 (로그인, 프로필 조회, 비밀번호 변경).

Auth Router (Login, current profile and password change endpoints).
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.api.deps import get_current_user
from gearguard.database import get_db
from gearguard.models.user import User
from gearguard.schemas.auth import ChangePasswordRequest, LoginRequest, TokenResponse
from gearguard.schemas.common import MessageResponse
from gearguard.services.auth_service import auth_service
from gearguard.services.user_service import user_service

router: APIRouter = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """로그인 (이메일/비밀번호로 액세스 토큰 발급).

    Login endpoint. Issues an access token for valid credentials.
    """
    result: TokenResponse = await auth_service.login(db, data)
    await db.commit()
    return result


@router.get("/me")
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """현재 사용자 프로필 조회 (Profile of the authenticated user)."""
    return user_service.build_response(current_user)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    data: ChangePasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict[str, str]:
    await auth_service.change_password(db, current_user, data.current_password, data.new_password)
    await db.commit()
    return {"message": "비밀번호가 변경되었습니다 (Password changed)"}
