"""사용자 서비스 (사용자 CRUD 및 기술자 조회 비즈니스 로직).

User Service: Business logic for user management and the technician
directory.
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.models.user import User
from gearguard.repositories.user_repository import user_repository
from gearguard.repositories.workshop_repository import workshop_repository
from gearguard.schemas.user import UserCreate, UserUpdate
from gearguard.utils.exceptions import BadRequestError, DuplicateError, NotFoundError
from gearguard.utils.password import hash_password

logger = logging.getLogger(__name__)


class UserService:
    """사용자 관련 비즈니스 로직을 처리하는 서비스.

    Service handling user business logic.
    """

    def build_response(self, user: User) -> dict:
        """사용자 응답 딕셔너리 (password_hash는 절대 포함하지 않음)."""
        return {
            "id": str(user.id),
            "email": user.email,
            "full_name": user.full_name,
            "role": user.role,
            "status": user.status,
            "workshop_id": str(user.workshop_id) if user.workshop_id else None,
            "skills": list(user.skills or []),
            "workload": user.workload,
            "phone": user.phone,
            "department": user.department,
            "last_login": user.last_login,
            "created_at": user.created_at,
        }

    async def list_users(
        self,
        db: AsyncSession,
        role: str | None = None,
        status: str | None = None,
        workshop_id: UUID | None = None,
        search: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[User], int]:
        return await user_repository.list_users(db, role, status, workshop_id, search, page, per_page)

    async def get_user(self, db: AsyncSession, user_id: UUID) -> User:
        user = await user_repository.get_by_id(db, user_id)
        if user is None:
            raise NotFoundError("사용자를 찾을 수 없습니다 (User not found)")
        return user

    async def _ensure_workshop(self, db: AsyncSession, workshop_id: UUID | None) -> None:
        if workshop_id is not None and await workshop_repository.get_by_id(db, workshop_id) is None:
            raise BadRequestError("작업장을 찾을 수 없습니다 (Workshop not found)", code="INVALID_WORKSHOP")

    async def create_user(self, db: AsyncSession, data: UserCreate) -> User:
        """사용자를 생성합니다.

        Create a user account. E-mail is unique (case-insensitive).

        Raises:
            DuplicateError: 이메일 중복 (E-mail already registered)
            BadRequestError: 존재하지 않는 작업장 (Unknown workshop)
        """
        email = data.email.strip().lower()
        if await user_repository.get_by_email(db, email) is not None:
            raise DuplicateError("이미 등록된 이메일입니다 (Email already registered)", code="EMAIL_EXISTS")
        await self._ensure_workshop(db, data.workshop_id)

        user = await user_repository.create(
            db,
            {
                "email": email,
                "full_name": data.full_name.strip(),
                "password_hash": hash_password(data.password),
                "role": data.role,
                "status": data.status,
                "workshop_id": data.workshop_id,
                "skills": data.skills,
                "phone": data.phone,
                "department": data.department,
            },
        )
        logger.info("Created %s user %s", user.role, user.email)
        return user

    async def update_user(self, db: AsyncSession, user_id: UUID, data: UserUpdate) -> User:
        update_data = data.model_dump(exclude_unset=True)
        if "workshop_id" in update_data:
            await self._ensure_workshop(db, update_data["workshop_id"])
        updated = await user_repository.update(db, user_id, update_data)
        if updated is None:
            raise NotFoundError("사용자를 찾을 수 없습니다 (User not found)")
        return updated

    async def deactivate_user(self, db: AsyncSession, user_id: UUID, current_user_id: UUID) -> User:
        """사용자를 비활성화합니다 (물리 삭제 없음).

        Deactivate a user account. Users are never physically deleted because
        requests and ledgers reference them.
        """
        if user_id == current_user_id:
            raise BadRequestError("자기 자신은 비활성화할 수 없습니다 (Cannot deactivate yourself)")
        user = await self.get_user(db, user_id)
        user.status = "inactive"
        await db.flush()
        return user

    async def set_workload(self, db: AsyncSession, user_id: UUID, workload: int) -> User:
        """작업량 카운터를 직접 보정합니다.

        Overwrite a user's workload counter, used to repair a counter that
        drifted from the open assignments.
        """
        user = await self.get_user(db, user_id)
        previous: int = user.workload
        user.workload = workload
        await db.flush()
        logger.warning("Workload of %s corrected from %d to %d", user.email, previous, workload)
        return user

    async def list_available_technicians(
        self,
        db: AsyncSession,
        skill: str | None = None,
        team_id: UUID | None = None,
    ) -> list[User]:
        return await user_repository.find_available_technicians(db, skill=skill, team_id=team_id)


user_service: UserService = UserService()
