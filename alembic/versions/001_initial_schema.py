"""Initial schema - Create all tables

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ASSIGNMENT_STATUSES = ('PENDING', 'IN_PROGRESS', 'COMPLETED', 'FAILED', 'CANCELLED')
JOB_STATUSES = (
    'DRAFT', 'PENDING', 'APPROVED', 'PUBLISHED', 'IN_PROGRESS',
    'ON_HOLD', 'CANCELLED', 'EXPIRED', 'COMPLETED', 'ARCHIVED',
)


def _enum(name: str, *values: str) -> postgresql.ENUM:
    return postgresql.ENUM(*values, name=name, create_type=False)


def upgrade() -> None:
    # Create enum types
    op.execute("CREATE TYPE userrole AS ENUM ('ADMIN', 'CLIENT', 'DEVELOPER')")
    op.execute(f"CREATE TYPE jobstatus AS ENUM {JOB_STATUSES}")
    op.execute("CREATE TYPE jobpriority AS ENUM ('LOW', 'MEDIUM', 'HIGH', 'URGENT', 'CRITICAL')")
    op.execute(f"CREATE TYPE assignmentstatus AS ENUM {ASSIGNMENT_STATUSES}")
    op.execute("CREATE TYPE teamrole AS ENUM ('LEAD', 'MEMBER', 'REVIEWER')")
    op.execute("CREATE TYPE scoringalgorithm AS ENUM ('DEFAULT', 'LINEAR', 'CUSTOM')")

    # Create users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('username', sa.String(100), unique=True, nullable=True),
        sa.Column('firstname', sa.String(100), nullable=False, server_default=''),
        sa.Column('lastname', sa.String(100), nullable=False, server_default=''),
        sa.Column('role', _enum('userrole', 'ADMIN', 'CLIENT', 'DEVELOPER'), nullable=False, server_default='DEVELOPER', index=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    # Create profiles table
    op.create_table(
        'profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), unique=True, nullable=False, index=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('skills', postgresql.JSON(), nullable=False, server_default='[]'),
        sa.Column('availability', postgresql.JSON(), nullable=True),
        sa.Column('work_preferences', postgresql.JSON(), nullable=True),
        sa.Column('education', postgresql.JSON(), nullable=True),
        sa.Column('portfolio_links', postgresql.JSON(), nullable=False, server_default='[]'),
        sa.Column('hourly_rate', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    # Create jobs table
    op.create_table(
        'jobs',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('status', _enum('jobstatus', *JOB_STATUSES), nullable=False, server_default='DRAFT', index=True),
        sa.Column('priority', _enum('jobpriority', 'LOW', 'MEDIUM', 'HIGH', 'URGENT', 'CRITICAL'), nullable=False, server_default='MEDIUM'),
        sa.Column('required_skills', postgresql.JSON(), nullable=True),
        sa.Column('preferred_skills', postgresql.JSON(), nullable=True),
        sa.Column('tags', postgresql.JSON(), nullable=False, server_default='[]'),
        sa.Column('estimated_hours', sa.Integer(), nullable=True),
        sa.Column('deadline', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('status_changed_at', sa.DateTime(), nullable=True),
        sa.Column('previous_status', _enum('jobstatus', *JOB_STATUSES), nullable=True),
    )

    # Create job_assignments table
    op.create_table(
        'job_assignments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('job_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('developer_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('assigned_by', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', _enum('assignmentstatus', *ASSIGNMENT_STATUSES), nullable=False, server_default='PENDING', index=True),
        sa.Column('assignment_type', sa.String(50), nullable=False, server_default='MANUAL'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    # At most one active assignment per (job, developer)
    op.create_index(
        'uq_job_assignments_active',
        'job_assignments',
        ['job_id', 'developer_id'],
        unique=True,
        postgresql_where=sa.text("status IN ('PENDING', 'IN_PROGRESS')"),
    )

    # Create teams table
    op.create_table(
        'teams',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    # Create team_members table
    op.create_table(
        'team_members',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('team_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('role', _enum('teamrole', 'LEAD', 'MEMBER', 'REVIEWER'), nullable=False, server_default='MEMBER'),
        sa.Column('joined_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('team_id', 'user_id', name='uq_team_members_team_user'),
    )

    # Create team_assignments table
    op.create_table(
        'team_assignments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('job_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('team_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('status', _enum('assignmentstatus', *ASSIGNMENT_STATUSES), nullable=False, server_default='PENDING'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('assigned_by', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('assigned_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    # Create status_history table
    op.create_table(
        'status_history',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('assignment_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('job_assignments.id', ondelete='CASCADE'), nullable=True, index=True),
        sa.Column('team_assignment_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('team_assignments.id', ondelete='CASCADE'), nullable=True, index=True),
        sa.Column('previous_status', _enum('assignmentstatus', *ASSIGNMENT_STATUSES), nullable=True),
        sa.Column('new_status', _enum('assignmentstatus', *ASSIGNMENT_STATUSES), nullable=False, index=True),
        sa.Column('changed_by', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(64), nullable=True),
        sa.Column('user_agent', sa.String(512), nullable=True),
        sa.Column('metadata', postgresql.JSON(), nullable=True),
        sa.Column('changed_at', sa.DateTime(), nullable=False, server_default=sa.func.now(), index=True),
        sa.CheckConstraint(
            '(assignment_id IS NULL) != (team_assignment_id IS NULL)',
            name='ck_status_history_single_target',
        ),
    )

    # Create scoring_configs table
    op.create_table(
        'scoring_configs',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('algorithm', _enum('scoringalgorithm', 'DEFAULT', 'LINEAR', 'CUSTOM'), nullable=False, server_default='DEFAULT'),
        sa.Column('weights', postgresql.JSON(), nullable=False),
        sa.Column('constraints', postgresql.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true(), index=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    # Create scoring_runs table
    op.create_table(
        'scoring_runs',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('job_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('triggered_by', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('algorithm', _enum('scoringalgorithm', 'DEFAULT', 'LINEAR', 'CUSTOM'), nullable=False, server_default='DEFAULT'),
        sa.Column('config_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('scoring_configs.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now(), index=True),
    )

    # Create assignment_scores table
    op.create_table(
        'assignment_scores',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('run_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('scoring_runs.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('job_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('developer_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('total_score', sa.Float(), nullable=False),
        sa.Column('breakdown', postgresql.JSON(), nullable=False),
        sa.Column('rank', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('run_id', 'developer_id', name='uq_assignment_scores_run_developer'),
    )

    # Create developer_performance_metrics table
    op.create_table(
        'developer_performance_metrics',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('developer_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), unique=True, nullable=False, index=True),
        sa.Column('completed_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('failed_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('cancelled_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('on_time_rate', sa.Float(), nullable=False, server_default='0.0'),
        sa.Column('avg_cycle_time_hours', sa.Float(), nullable=False, server_default='0.0'),
        sa.Column('avg_quality_rating', sa.Float(), nullable=False, server_default='0.0'),
        sa.Column('last_updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table('developer_performance_metrics')
    op.drop_table('assignment_scores')
    op.drop_table('scoring_runs')
    op.drop_table('scoring_configs')
    op.drop_table('status_history')
    op.drop_table('team_assignments')
    op.drop_table('team_members')
    op.drop_table('teams')
    op.drop_index('uq_job_assignments_active', table_name='job_assignments')
    op.drop_table('job_assignments')
    op.drop_table('jobs')
    op.drop_table('profiles')
    op.drop_table('users')

    op.execute("DROP TYPE scoringalgorithm")
    op.execute("DROP TYPE teamrole")
    op.execute("DROP TYPE assignmentstatus")
    op.execute("DROP TYPE jobpriority")
    op.execute("DROP TYPE jobstatus")
    op.execute("DROP TYPE userrole")
