"""
Tests for the status history (audit trail) endpoints and service.
"""

import pytest
from uuid import UUID, uuid4
from sqlalchemy import select

from app.models import AssignmentStatus, JobAssignment, StatusHistory
from app.services import status_history_service
from app.services.status_history_service import record_status_change
from tests.conftest import auth_headers


async def assign(client, headers, job, developer):
    response = await client.post(
        "/v1/assignments",
        json={"job_id": str(job.id), "developer_id": str(developer.id)},
        headers=headers,
    )
    return response.json()["data"]["id"]


async def move(client, headers, assignment_id, status):
    return await client.patch(
        f"/v1/assignments/{assignment_id}/status",
        json={"status": status},
        headers=headers,
    )


class TestRecordStatusChange:
    """Tests for writing history records."""

    @pytest.mark.asyncio
    async def test_requires_exactly_one_target(self, db_session, admin_user):
        with pytest.raises(ValueError):
            await record_status_change(
                db_session, new_status=AssignmentStatus.PENDING, changed_by=admin_user.id
            )
        with pytest.raises(ValueError):
            await record_status_change(
                db_session,
                new_status=AssignmentStatus.PENDING,
                changed_by=admin_user.id,
                assignment_id=uuid4(),
                team_assignment_id=uuid4(),
            )

    @pytest.mark.asyncio
    async def test_skipped_without_actor(self, db_session, job, developer):
        assignment = JobAssignment(job_id=job.id, developer_id=developer.id, assigned_by=developer.id)
        db_session.add(assignment)
        await db_session.commit()

        result = await record_status_change(
            db_session,
            assignment_id=assignment.id,
            new_status=AssignmentStatus.PENDING,
            changed_by=None,
        )

        assert result is None
        rows = await db_session.execute(select(StatusHistory))
        assert rows.scalars().all() == []

    @pytest.mark.asyncio
    async def test_failed_write_keeps_status_change(
        self, client, admin_headers, developer_headers, job, developer, db_session, monkeypatch
    ):
        assignment_id = await assign(client, admin_headers, job, developer)

        def unwritable_record(**fields):
            return StatusHistory(**{**fields, "new_status": None})

        monkeypatch.setattr(status_history_service, "StatusHistory", unwritable_record)

        response = await move(client, developer_headers, assignment_id, "IN_PROGRESS")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "IN_PROGRESS"

        db_session.expire_all()
        assignment = await db_session.get(JobAssignment, UUID(assignment_id))
        assert assignment.status == AssignmentStatus.IN_PROGRESS
        history = await db_session.execute(
            select(StatusHistory).where(StatusHistory.assignment_id == UUID(assignment_id))
        )
        assert [h.new_status for h in history.scalars().all()] == [AssignmentStatus.PENDING]


class TestStatusHistoryQuery:
    """Tests for GET /v1/status-history/all."""

    @pytest.mark.asyncio
    async def test_assignment_history_in_order(self, client, admin_headers, developer_headers, job, developer):
        assignment_id = await assign(client, admin_headers, job, developer)
        await move(client, developer_headers, assignment_id, "IN_PROGRESS")
        await move(client, developer_headers, assignment_id, "COMPLETED")

        response = await client.get(
            f"/v1/status-history/all?assignmentId={assignment_id}",
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["pagination"] is None
        assert len(data["assignments"]) == 1
        history = data["assignments"][0]["status_history"]
        assert [(h["previous_status"], h["new_status"]) for h in history] == [
            (None, "PENDING"),
            ("PENDING", "IN_PROGRESS"),
            ("IN_PROGRESS", "COMPLETED"),
        ]

    @pytest.mark.asyncio
    async def test_assignment_id_overrides_other_filters(self, client, admin_headers, job, developer, other_developer):
        assignment_id = await assign(client, admin_headers, job, developer)
        await assign(client, admin_headers, job, other_developer)

        response = await client.get(
            "/v1/status-history/all",
            params={"assignmentId": assignment_id, "changedBy": str(uuid4()), "status": "FAILED"},
            headers=admin_headers,
        )

        data = response.json()["data"]
        assert [a["id"] for a in data["assignments"]] == [assignment_id]

    @pytest.mark.asyncio
    async def test_team_assignment_history(self, client, admin_headers, job, developer):
        created = await client.post(
            "/v1/assignments/team/create-and-assign",
            json={"name": "Ops", "job_id": str(job.id), "developer_ids": [str(developer.id)]},
            headers=admin_headers,
        )
        team_assignment_id = created.json()["data"]["id"]
        await client.patch(
            f"/v1/assignments/team/{team_assignment_id}/status",
            json={"status": "CANCELLED", "reason": "Client paused project"},
            headers=admin_headers,
        )

        response = await client.get(
            f"/v1/status-history/all?teamAssignmentId={team_assignment_id}",
            headers=admin_headers,
        )

        data = response.json()["data"]
        assert data["assignments"] == []
        team_assignment = data["team_assignment"]
        assert team_assignment["status"] == "CANCELLED"
        assert [h["new_status"] for h in team_assignment["status_history"]] == ["PENDING", "CANCELLED"]
        assert team_assignment["status_history"][1]["reason"] == "Client paused project"

    @pytest.mark.asyncio
    async def test_filter_by_actor_and_status(self, client, admin_headers, developer, other_developer, job):
        first = await assign(client, admin_headers, job, developer)
        await assign(client, admin_headers, job, other_developer)
        await move(client, auth_headers(developer), first, "IN_PROGRESS")

        by_actor = await client.get(
            f"/v1/status-history/all?changedBy={developer.id}", headers=admin_headers
        )
        by_status = await client.get(
            "/v1/status-history/all?status=IN_PROGRESS", headers=admin_headers
        )
        everything = await client.get("/v1/status-history/all", headers=admin_headers)

        assert [a["id"] for a in by_actor.json()["data"]["assignments"]] == [first]
        assert [a["id"] for a in by_status.json()["data"]["assignments"]] == [first]
        assert everything.json()["data"]["pagination"]["total"] == 2

    @pytest.mark.asyncio
    async def test_unknown_assignment(self, client, admin_headers):
        response = await client.get(
            f"/v1/status-history/all?assignmentId={uuid4()}", headers=admin_headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_developers_cannot_query(self, client, developer_headers):
        response = await client.get("/v1/status-history/all", headers=developer_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_limit_bounds(self, client, admin_headers):
        response = await client.get("/v1/status-history/all?limit=500", headers=admin_headers)
        assert response.status_code == 400


class TestStatusHistoryStats:
    """Tests for GET /v1/status-history/stats."""

    @pytest.mark.asyncio
    async def test_stats(self, client, admin_headers, developer_headers, job, developer, other_developer):
        first = await assign(client, admin_headers, job, developer)
        await assign(client, admin_headers, job, other_developer)
        await move(client, developer_headers, first, "IN_PROGRESS")

        response = await client.get("/v1/status-history/stats", headers=admin_headers)

        assert response.status_code == 200
        stats = response.json()["data"]
        assert stats["total_records"] == 3
        assert stats["records_by_status"]["PENDING"] == 2
        assert stats["records_by_status"]["IN_PROGRESS"] == 1
        assert stats["records_by_status"]["FAILED"] == 0
        assert stats["assignments_by_status"]["PENDING"] == 1
        assert stats["assignments_by_status"]["IN_PROGRESS"] == 1
        assert sum(stats["team_assignments_by_status"].values()) == 0

    @pytest.mark.asyncio
    async def test_stats_admin_only(self, client, client_headers):
        response = await client.get("/v1/status-history/stats", headers=client_headers)
        assert response.status_code == 403
