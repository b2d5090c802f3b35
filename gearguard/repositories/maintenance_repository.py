"""정비 요청 레포지토리 (정비 요청 관련 DB 쿼리 담당).

Maintenance Request Repository: Filtering, request-number allocation,
ledger appends and aggregate queries for maintenance requests.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import ColumnElement, Select, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gearguard.models.equipment import Equipment
from gearguard.models.maintenance import (
    MaintenanceRequest,
    PartUsage,
    RequestNumberSequence,
    WorkNote,
)
from gearguard.repositories.base import BaseRepository
from gearguard.utils.constants import TERMINAL_STATUSES
from gearguard.utils.request_number import (
    format_request_number,
    parse_sequence,
    period_for,
    period_prefix,
)


@dataclass
class RequestFilter:
    """정비 요청 조회 조건.

    Filter and visibility scope for maintenance request queries.
    The scope_* fields restrict what a non-admin caller may see; a technician
    scope matches requests assigned to the technician OR to one of the teams.

    Attributes:
        status / type / priority: 분류 필터 (Categorical filters)
        technician_id / team_id / equipment_id / workshop_id: 참조 필터 (Reference filters)
        search: 제목/설명/번호 검색어 (Matches title, description or request number)
        created_from / created_to: 생성일 범위 [from, to) (Creation window)
        scope_creator_id: 요청자 범위 (Only requests created by this user)
        scope_technician_id / scope_team_ids: 기술자 범위 (Assigned to me or my teams)
    """

    status: str | None = None
    type: str | None = None
    priority: str | None = None
    technician_id: UUID | None = None
    team_id: UUID | None = None
    equipment_id: UUID | None = None
    workshop_id: UUID | None = None
    search: str | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None
    scope_creator_id: UUID | None = None
    scope_technician_id: UUID | None = None
    scope_team_ids: list[UUID] = field(default_factory=list)


class MaintenanceRepository(BaseRepository[MaintenanceRequest]):
    """정비 요청 레포지토리.

    Extends:
        BaseRepository[MaintenanceRequest]
    """

    def __init__(self) -> None:
        super().__init__(MaintenanceRequest)

    # --- 조회 조건 (Filtering) ---

    def _conditions(self, f: RequestFilter) -> list[ColumnElement[bool]]:
        """필터를 WHERE 조건 목록으로 변환합니다."""
        mr = MaintenanceRequest
        conds: list[ColumnElement[bool]] = []
        if f.status is not None:
            conds.append(mr.status == f.status)
        if f.type is not None:
            conds.append(mr.type == f.type)
        if f.priority is not None:
            conds.append(mr.priority == f.priority)
        if f.technician_id is not None:
            conds.append(mr.assigned_technician_id == f.technician_id)
        if f.team_id is not None:
            conds.append(mr.assigned_team_id == f.team_id)
        if f.equipment_id is not None:
            conds.append(mr.equipment_id == f.equipment_id)
        if f.workshop_id is not None:
            # 작업장은 설비를 통해 결정 (Workshop is resolved through the equipment)
            conds.append(
                mr.equipment_id.in_(select(Equipment.id).where(Equipment.workshop_id == f.workshop_id))
            )
        if f.search:
            pattern = f"%{f.search.strip()}%"
            conds.append(
                or_(
                    mr.title.ilike(pattern),
                    mr.description.ilike(pattern),
                    mr.request_number.ilike(pattern),
                )
            )
        if f.created_from is not None:
            conds.append(mr.created_at >= f.created_from)
        if f.created_to is not None:
            conds.append(mr.created_at < f.created_to)
        if f.scope_creator_id is not None:
            conds.append(mr.created_by == f.scope_creator_id)
        if f.scope_technician_id is not None:
            visible: list[ColumnElement[bool]] = [mr.assigned_technician_id == f.scope_technician_id]
            if f.scope_team_ids:
                visible.append(mr.assigned_team_id.in_(f.scope_team_ids))
            conds.append(or_(*visible))
        return conds

    async def list_requests(
        self,
        db: AsyncSession,
        f: RequestFilter,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[MaintenanceRequest], int]:
        """필터가 적용된 정비 요청 목록을 최신순으로 조회합니다.

        Returns:
            tuple[Sequence[MaintenanceRequest], int]: (요청 목록, 전체 개수)
        """
        query: Select = (
            select(MaintenanceRequest)
            .where(*self._conditions(f))
            .order_by(MaintenanceRequest.created_at.desc(), MaintenanceRequest.request_number.desc())
        )
        return await self.get_paginated(db, query, page, per_page)

    # --- 요청 번호 (Request numbering) ---

    async def get_max_sequence(self, db: AsyncSession, period: str) -> int:
        """해당 월에 발급된 최대 순번 (Highest existing sequence for a YYYYMM period)."""
        number_col = MaintenanceRequest.request_number
        query = (
            select(number_col)
            .where(number_col.like(f"{period_prefix(period)}%"))
            .order_by(func.length(number_col).desc(), number_col.desc())
            .limit(1)
        )
        latest: str | None = (await db.execute(query)).scalar_one_or_none()
        if latest is None:
            return 0
        return parse_sequence(latest) or 0

    async def next_request_number(self, db: AsyncSession, now: datetime) -> str:
        """다음 요청 번호를 발급합니다.

        Allocate the next request number for the month of ``now``.
        The per-month counter row is bumped with a single atomic UPDATE, which
        holds the row lock until the surrounding transaction ends. When the
        month has no counter yet, it is seeded from the highest number already
        issued; a concurrent seeding attempt surfaces as an IntegrityError on
        flush, which the caller retries. A counter that has fallen behind the
        highest issued number (restores, imports) is moved past it and saved,
        so a retry after a collision always gets a fresh number.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            now: 기준 시각 (Creation instant, UTC)

        Returns:
            str: 요청 번호 (e.g. "MR-202610-0001")
        """
        period: str = period_for(now)
        result = await db.execute(
            update(RequestNumberSequence)
            .where(RequestNumberSequence.period == period)
            .values(last_value=RequestNumberSequence.last_value + 1)
            .returning(RequestNumberSequence.last_value)
            .execution_options(synchronize_session=False)
        )
        value: int | None = result.scalar_one_or_none()
        if value is None:
            value = await self.get_max_sequence(db, period) + 1
            db.add(RequestNumberSequence(period=period, last_value=value))
            await db.flush()
            return format_request_number(period, value)

        # 카운터가 발급된 번호보다 뒤처지면 따라잡음 (Counter behind issued numbers catches up)
        issued: int = await self.get_max_sequence(db, period)
        if value <= issued:
            value = issued + 1
            await db.execute(
                update(RequestNumberSequence)
                .where(RequestNumberSequence.period == period)
                .values(last_value=value)
                .execution_options(synchronize_session=False)
            )
        return format_request_number(period, value)

    # --- 작업 기록/부품 (Ledger) ---

    async def add_work_note(self, db: AsyncSession, request: MaintenanceRequest, data: dict[str, Any]) -> WorkNote:
        note = WorkNote(request_id=request.id, **data)
        db.add(note)
        await db.flush()
        await db.refresh(request, attribute_names=["work_notes"])
        return note

    async def add_parts(
        self,
        db: AsyncSession,
        request: MaintenanceRequest,
        parts: list[dict[str, Any]],
    ) -> list[PartUsage]:
        rows = [PartUsage(request_id=request.id, **part) for part in parts]
        db.add_all(rows)
        await db.flush()
        await db.refresh(request, attribute_names=["parts_used"])
        return rows

    async def sum_parts_cost(self, db: AsyncSession, request_id: UUID) -> float:
        """부품 원장 합계 (Σ quantity × unit_cost over the stored ledger)."""
        query = select(func.coalesce(func.sum(PartUsage.quantity * PartUsage.unit_cost), 0)).where(
            PartUsage.request_id == request_id
        )
        return float((await db.execute(query)).scalar() or 0)

    # --- 집계 (Aggregation) ---

    async def count_by(self, db: AsyncSession, column: Any, f: RequestFilter) -> dict[str, int]:
        """분류 컬럼별 건수 (Group-count by a categorical column)."""
        query = select(column, func.count()).where(*self._conditions(f)).group_by(column)
        rows = (await db.execute(query)).all()
        return {value: count for value, count in rows}

    def _overdue_conditions(self, now: datetime) -> list[ColumnElement[bool]]:
        return [
            MaintenanceRequest.status.not_in(TERMINAL_STATUSES),
            MaintenanceRequest.due_date.is_not(None),
            MaintenanceRequest.due_date < now,
        ]

    async def count_overdue(self, db: AsyncSession, f: RequestFilter, now: datetime) -> int:
        query = (
            select(func.count())
            .select_from(MaintenanceRequest)
            .where(*self._conditions(f), *self._overdue_conditions(now))
        )
        return (await db.execute(query)).scalar() or 0

    async def count_unassigned(self, db: AsyncSession) -> int:
        """기술자 미배정 신규 요청 수 (New requests without a technician)."""
        query = select(func.count()).select_from(MaintenanceRequest).where(
            MaintenanceRequest.status == "New",
            MaintenanceRequest.assigned_technician_id.is_(None),
        )
        return (await db.execute(query)).scalar() or 0

    async def list_open_for_technicians(
        self,
        db: AsyncSession,
        technician_ids: list[UUID],
    ) -> Sequence[MaintenanceRequest]:
        """기술자별 진행 중 배정 목록 (Open assignments, earliest due date first)."""
        if not technician_ids:
            return []
        mr = MaintenanceRequest
        query = (
            select(mr)
            .where(mr.assigned_technician_id.in_(technician_ids), mr.status.not_in(TERMINAL_STATUSES))
            .order_by(mr.due_date.is_(None), mr.due_date, mr.request_number)
        )
        return (await db.execute(query)).scalars().all()

    async def get_completion_spans(self, db: AsyncSession, f: RequestFilter) -> list[tuple[datetime, datetime]]:
        """완료 요청의 (생성, 완료) 시각: (created_at, completed_at) of Completed requests."""
        query = select(MaintenanceRequest.created_at, MaintenanceRequest.completed_at).where(
            *self._conditions(f),
            MaintenanceRequest.status == "Completed",
            MaintenanceRequest.completed_at.is_not(None),
        )
        return [(row[0], row[1]) for row in (await db.execute(query)).all()]

    async def list_overdue(
        self,
        db: AsyncSession,
        f: RequestFilter,
        now: datetime,
        limit: int = 50,
    ) -> Sequence[MaintenanceRequest]:
        query = (
            select(MaintenanceRequest)
            .where(*self._conditions(f), *self._overdue_conditions(now))
            .order_by(MaintenanceRequest.due_date)
            .limit(limit)
        )
        return (await db.execute(query)).scalars().all()

    async def list_recent(self, db: AsyncSession, f: RequestFilter, limit: int = 5) -> Sequence[MaintenanceRequest]:
        query = (
            select(MaintenanceRequest)
            .where(*self._conditions(f))
            .order_by(MaintenanceRequest.created_at.desc())
            .limit(limit)
        )
        return (await db.execute(query)).scalars().all()

    async def list_in_window(
        self,
        db: AsyncSession,
        f: RequestFilter,
        start: datetime,
        end: datetime,
    ) -> Sequence[MaintenanceRequest]:
        """예정일 또는 마감일이 [start, end) 안에 있는 요청."""
        mr = MaintenanceRequest
        query = (
            select(mr)
            .where(
                *self._conditions(f),
                or_(
                    (mr.scheduled_date >= start) & (mr.scheduled_date < end),
                    (mr.due_date >= start) & (mr.due_date < end),
                ),
            )
            .order_by(func.coalesce(mr.scheduled_date, mr.due_date))
        )
        return (await db.execute(query)).scalars().all()

    async def list_for_equipment(
        self,
        db: AsyncSession,
        equipment_id: UUID,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[MaintenanceRequest], int]:
        """설비 정비 이력 (Maintenance history of one piece of equipment)."""
        query: Select = (
            select(MaintenanceRequest)
            .where(MaintenanceRequest.equipment_id == equipment_id)
            .order_by(MaintenanceRequest.created_at.desc())
        )
        return await self.get_paginated(db, query, page, per_page)


maintenance_repository: MaintenanceRepository = MaintenanceRepository()
