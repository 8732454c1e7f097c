"""
Unit tests for the assignment status workflow.
Tests the transition table and the job side-effect triggers.
"""

import pytest

from app.exceptions import InvalidTransitionError
from app.models import AssignmentStatus, JobAssignment, JobStatus, TeamAssignment, Team
from app.services.status_workflow import (
    TRANSITIONS,
    allowed_transitions,
    can_transition,
    run_trigger,
    validate_transition,
)


class TestTransitionTable:
    """Tests for the fixed transition table."""

    def test_every_status_has_an_entry(self):
        assert set(TRANSITIONS) == set(AssignmentStatus)

    def test_pending_targets(self):
        assert allowed_transitions(AssignmentStatus.PENDING) == [
            AssignmentStatus.IN_PROGRESS,
            AssignmentStatus.CANCELLED,
        ]

    def test_in_progress_targets(self):
        assert allowed_transitions(AssignmentStatus.IN_PROGRESS) == [
            AssignmentStatus.COMPLETED,
            AssignmentStatus.FAILED,
            AssignmentStatus.CANCELLED,
        ]

    def test_completed_can_only_be_cancelled(self):
        assert allowed_transitions(AssignmentStatus.COMPLETED) == [AssignmentStatus.CANCELLED]

    def test_failed_can_be_retried(self):
        assert can_transition(AssignmentStatus.FAILED, AssignmentStatus.IN_PROGRESS)

    def test_cancelled_is_terminal(self):
        assert allowed_transitions(AssignmentStatus.CANCELLED) == []
        for target in AssignmentStatus:
            assert not can_transition(AssignmentStatus.CANCELLED, target)

    def test_finished_work_never_reactivates(self):
        for current in (AssignmentStatus.COMPLETED, AssignmentStatus.CANCELLED):
            for target in (AssignmentStatus.PENDING, AssignmentStatus.IN_PROGRESS):
                assert not can_transition(current, target)

    def test_no_self_transitions(self):
        for status in AssignmentStatus:
            assert not can_transition(status, status)

    def test_pending_cannot_skip_to_completed(self):
        assert not can_transition(AssignmentStatus.PENDING, AssignmentStatus.COMPLETED)


class TestValidateTransition:
    """Tests for the error raised on invalid transitions."""

    def test_valid_transition_passes(self):
        validate_transition(AssignmentStatus.PENDING, AssignmentStatus.IN_PROGRESS)

    def test_invalid_transition_details(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            validate_transition(AssignmentStatus.PENDING, AssignmentStatus.COMPLETED)

        exc = exc_info.value
        assert exc.status_code == 400
        assert exc.error_code == "INVALID_TRANSITION"
        assert exc.details == {
            "current": "PENDING",
            "target": "COMPLETED",
            "allowed": ["IN_PROGRESS", "CANCELLED"],
        }

    def test_terminal_status_reports_empty_allowed(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            validate_transition(AssignmentStatus.CANCELLED, AssignmentStatus.PENDING)
        assert exc_info.value.details["allowed"] == []


class TestTriggers:
    """Tests for the job side effects of status changes."""

    async def _assign(self, db_session, job, developer, status):
        assignment = JobAssignment(
            job_id=job.id,
            developer_id=developer.id,
            assigned_by=developer.id,
            status=status,
        )
        db_session.add(assignment)
        await db_session.flush()
        return assignment

    @pytest.mark.asyncio
    async def test_in_progress_marks_job_in_progress(self, db_session, job, developer):
        await self._assign(db_session, job, developer, AssignmentStatus.IN_PROGRESS)

        await run_trigger(db_session, AssignmentStatus.IN_PROGRESS, job.id)

        assert job.status == JobStatus.IN_PROGRESS
        assert job.previous_status == JobStatus.APPROVED
        assert job.status_changed_at is not None

    @pytest.mark.asyncio
    async def test_completed_waits_for_all_siblings(self, db_session, job, developer, other_developer):
        await self._assign(db_session, job, developer, AssignmentStatus.COMPLETED)
        await self._assign(db_session, job, other_developer, AssignmentStatus.IN_PROGRESS)

        await run_trigger(db_session, AssignmentStatus.COMPLETED, job.id)

        assert job.status == JobStatus.APPROVED

    @pytest.mark.asyncio
    async def test_completed_ignores_cancelled_siblings(self, db_session, job, developer, other_developer):
        await self._assign(db_session, job, developer, AssignmentStatus.COMPLETED)
        await self._assign(db_session, job, other_developer, AssignmentStatus.CANCELLED)

        await run_trigger(db_session, AssignmentStatus.COMPLETED, job.id)

        assert job.status == JobStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_completed_counts_team_assignments(self, db_session, job, developer, admin_user):
        await self._assign(db_session, job, developer, AssignmentStatus.COMPLETED)
        team = Team(name="Platform")
        db_session.add(team)
        await db_session.flush()
        db_session.add(TeamAssignment(
            job_id=job.id,
            team_id=team.id,
            assigned_by=admin_user.id,
            status=AssignmentStatus.PENDING,
        ))
        await db_session.flush()

        await run_trigger(db_session, AssignmentStatus.COMPLETED, job.id)

        assert job.status == JobStatus.APPROVED

    @pytest.mark.asyncio
    async def test_cancelled_reopens_job_when_nothing_active(self, db_session, job, developer):
        job.status = JobStatus.IN_PROGRESS
        await self._assign(db_session, job, developer, AssignmentStatus.CANCELLED)

        await run_trigger(db_session, AssignmentStatus.CANCELLED, job.id)

        assert job.status == JobStatus.APPROVED
        assert job.previous_status == JobStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_cancelled_keeps_job_with_active_sibling(self, db_session, job, developer, other_developer):
        job.status = JobStatus.IN_PROGRESS
        await self._assign(db_session, job, developer, AssignmentStatus.CANCELLED)
        await self._assign(db_session, job, other_developer, AssignmentStatus.IN_PROGRESS)

        await run_trigger(db_session, AssignmentStatus.CANCELLED, job.id)

        assert job.status == JobStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_pending_and_failed_leave_job_alone(self, db_session, job):
        await run_trigger(db_session, AssignmentStatus.PENDING, job.id)
        await run_trigger(db_session, AssignmentStatus.FAILED, job.id)

        assert job.status == JobStatus.APPROVED
