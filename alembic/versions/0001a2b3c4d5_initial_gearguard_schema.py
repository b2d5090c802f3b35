"""initial_gearguard_schema

Revision ID: 0001a2b3c4d5
Revises:
Create Date: 2026-10-18 09:00:00.000000

초기 스키마 생성: 작업장, 사용자, 팀, 설비, 정비 요청과 원장, 알림, 속도 제한.
Initial schema: workshops, users, teams, equipment, maintenance requests with
their work-note/parts ledgers, request numbering, notifications, rate limits.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID


# revision identifiers, used by Alembic.
revision: str = '0001a2b3c4d5'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # workshops: 작업장 (Physical sites)
    op.create_table(
        'workshops',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('code', sa.String(10), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', JSONB(), nullable=True),
        sa.Column('status', sa.String(20), server_default='Active', nullable=False),
        sa.Column('specializations', JSONB(), server_default='[]', nullable=False),
        sa.Column('created_by', UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # users: 사용자 (Admins, technicians, employees)
    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('full_name', sa.String(100), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), server_default='employee', nullable=False),
        sa.Column('status', sa.String(20), server_default='active', nullable=False),
        sa.Column('workshop_id', UUID(as_uuid=True), sa.ForeignKey('workshops.id', ondelete='SET NULL'), nullable=True),
        sa.Column('skills', JSONB(), server_default='[]', nullable=False),
        sa.Column('workload', sa.Integer(), server_default='0', nullable=False),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('department', sa.String(100), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('workload >= 0', name='ck_users_workload_non_negative'),
    )
    op.create_index('ix_users_role_status_workload', 'users', ['role', 'status', 'workload'])

    # teams / team_members: 팀과 구성원 (Teams and membership)
    op.create_table(
        'teams',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('workshop_id', UUID(as_uuid=True), sa.ForeignKey('workshops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('specialization', JSONB(), server_default='[]', nullable=False),
        sa.Column('team_lead_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('status', sa.String(20), server_default='Active', nullable=False),
        sa.Column('max_capacity', sa.Integer(), server_default='10', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'team_members',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('team_id', UUID(as_uuid=True), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('member_role', sa.String(20), server_default='junior', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('team_id', 'user_id', name='uq_team_member'),
    )

    # equipment: 설비 (Serviceable assets)
    op.create_table(
        'equipment',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('serial_number', sa.String(100), nullable=False, unique=True),
        sa.Column('workshop_id', UUID(as_uuid=True), sa.ForeignKey('workshops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category', sa.String(50), nullable=False),
        sa.Column('manufacturer', sa.String(100), nullable=True),
        sa.Column('model', sa.String(100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', JSONB(), nullable=False),
        sa.Column('assigned_team_id', UUID(as_uuid=True), sa.ForeignKey('teams.id'), nullable=False),
        sa.Column('primary_technician_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('status', sa.String(30), server_default='Active', nullable=False),
        sa.Column('criticality', sa.String(20), server_default='Medium', nullable=False),
        sa.Column('purchase_date', sa.Date(), nullable=True),
        sa.Column('warranty_expiry', sa.Date(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # maintenance_requests: 정비 요청 (Maintenance request lifecycle)
    op.create_table(
        'maintenance_requests',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('request_number', sa.String(20), nullable=False, unique=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('type', sa.String(20), server_default='Corrective', nullable=False),
        sa.Column('category', sa.String(30), server_default='Other', nullable=False),
        sa.Column('equipment_id', UUID(as_uuid=True), sa.ForeignKey('equipment.id'), nullable=False),
        sa.Column('location', JSONB(), nullable=True),
        sa.Column('priority', sa.String(20), server_default='Medium', nullable=False),
        sa.Column('urgency', sa.String(20), server_default='Medium', nullable=False),
        sa.Column('impact', sa.String(20), server_default='Medium', nullable=False),
        sa.Column('created_by', UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('assigned_technician_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('assigned_team_id', UUID(as_uuid=True), sa.ForeignKey('teams.id', ondelete='SET NULL'), nullable=True),
        sa.Column('status', sa.String(30), server_default='New', nullable=False),
        sa.Column('scheduled_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('estimated_duration', sa.Float(), nullable=True),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('actual_start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('actual_end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cost_labor', sa.Float(), server_default='0', nullable=False),
        sa.Column('cost_parts', sa.Float(), server_default='0', nullable=False),
        sa.Column('cost_external', sa.Float(), server_default='0', nullable=False),
        sa.Column('sla_response_hours', sa.Float(), nullable=False),
        sa.Column('sla_resolution_hours', sa.Float(), nullable=False),
        sa.Column('response_deadline', sa.DateTime(timezone=True), nullable=False),
        sa.Column('resolution_deadline', sa.DateTime(timezone=True), nullable=False),
        sa.Column('sla_breached', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('tags', JSONB(), server_default='[]', nullable=False),
        sa.Column('feedback_rating', sa.Integer(), nullable=True),
        sa.Column('feedback_comment', sa.String(500), nullable=True),
        sa.Column('feedback_submitted_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('feedback_submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # 정비 요청 인덱스 (Maintenance request indexes)
    op.create_index('ix_mr_status', 'maintenance_requests', ['status'])
    op.create_index('ix_mr_equipment_id', 'maintenance_requests', ['equipment_id'])
    op.create_index('ix_mr_technician_status', 'maintenance_requests', ['assigned_technician_id', 'status'])
    op.create_index('ix_mr_team_status', 'maintenance_requests', ['assigned_team_id', 'status'])
    op.create_index('ix_mr_due_date', 'maintenance_requests', ['due_date'])

    # work_notes / parts_used: 추가 전용 원장 (Append-only ledgers)
    op.create_table(
        'work_notes',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('request_id', UUID(as_uuid=True), sa.ForeignKey('maintenance_requests.id', ondelete='CASCADE'), nullable=False),
        sa.Column('technician_id', UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('note', sa.String(1000), nullable=False),
        sa.Column('hours_worked', sa.Float(), server_default='0', nullable=False),
        sa.Column('attachments', JSONB(), server_default='[]', nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('hours_worked >= 0 AND hours_worked <= 24', name='ck_work_notes_hours'),
    )
    op.create_index('ix_work_notes_request_id', 'work_notes', ['request_id'])

    op.create_table(
        'parts_used',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('request_id', UUID(as_uuid=True), sa.ForeignKey('maintenance_requests.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('part_number', sa.String(100), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_cost', sa.Float(), server_default='0', nullable=False),
        sa.Column('supplier', sa.String(200), nullable=True),
        sa.Column('requested_by', UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('requested_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('quantity >= 1', name='ck_parts_used_quantity'),
        sa.CheckConstraint('unit_cost >= 0', name='ck_parts_used_unit_cost'),
    )
    op.create_index('ix_parts_used_request_id', 'parts_used', ['request_id'])

    # request_number_sequences: 월별 요청 번호 카운터 (Per-month numbering counter)
    op.create_table(
        'request_number_sequences',
        sa.Column('period', sa.String(6), primary_key=True),
        sa.Column('last_value', sa.Integer(), server_default='0', nullable=False),
    )

    # notifications: 인앱 알림 (In-app notifications)
    op.create_table(
        'notifications',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('message', sa.String(1000), nullable=False),
        sa.Column('reference_type', sa.String(50), nullable=True),
        sa.Column('reference_id', UUID(as_uuid=True), nullable=True),
        sa.Column('is_read', sa.Boolean(), server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])

    # rate_limit_hits: 민감 작업 속도 제한 기록 (Sensitive-operation hits)
    op.create_table(
        'rate_limit_hits',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('key', sa.String(200), nullable=False),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_rate_limit_hits_key_time', 'rate_limit_hits', ['key', 'occurred_at'])


def downgrade() -> None:
    op.drop_table('rate_limit_hits')
    op.drop_table('notifications')
    op.drop_table('request_number_sequences')
    op.drop_table('parts_used')
    op.drop_table('work_notes')
    op.drop_table('maintenance_requests')
    op.drop_table('equipment')
    op.drop_table('team_members')
    op.drop_table('teams')
    op.drop_table('users')
    op.drop_table('workshops')
