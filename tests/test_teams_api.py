"""
Tests for the team assignment API endpoints.
"""

import pytest
from uuid import uuid4

from app.models import JobStatus
from tests.conftest import auth_headers


async def create_team(client, headers, developer_ids, name="Core Platform"):
    return await client.post(
        "/v1/assignments/team",
        json={"name": name, "developer_ids": [str(d) for d in developer_ids]},
        headers=headers,
    )


async def create_and_assign(client, headers, job, developer_ids):
    return await client.post(
        "/v1/assignments/team/create-and-assign",
        json={
            "name": "Strike Team",
            "job_id": str(job.id),
            "developer_ids": [str(d) for d in developer_ids],
            "notes": "Two week engagement",
        },
        headers=headers,
    )


class TestTeams:
    """Tests for team creation and assignment."""

    @pytest.mark.asyncio
    async def test_create_team(self, client, admin_headers, developer, other_developer):
        response = await create_team(client, admin_headers, [developer.id, other_developer.id, developer.id])

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["name"] == "Core Platform"
        assert {m["user_id"] for m in data["members"]} == {str(developer.id), str(other_developer.id)}
        assert all(m["role"] == "MEMBER" for m in data["members"])

    @pytest.mark.asyncio
    async def test_create_team_rejects_non_developers(self, client, admin_headers, developer, client_user):
        response = await create_team(client, admin_headers, [developer.id, client_user.id])

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "VALIDATION_ERROR"
        assert body["details"]["invalid_developer_ids"] == [str(client_user.id)]

    @pytest.mark.asyncio
    async def test_create_team_requires_members(self, client, admin_headers):
        response = await create_team(client, admin_headers, [])
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_assign_existing_team(self, client, admin_headers, job, developer):
        team = await create_team(client, admin_headers, [developer.id])
        team_id = team.json()["data"]["id"]

        response = await client.post(
            "/v1/assignments/team/assign",
            json={"job_id": str(job.id), "team_id": team_id},
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "PENDING"
        assert data["team"]["id"] == team_id

    @pytest.mark.asyncio
    async def test_assign_unknown_team(self, client, admin_headers, job):
        response = await client.post(
            "/v1/assignments/team/assign",
            json={"job_id": str(job.id), "team_id": str(uuid4())},
            headers=admin_headers,
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_create_and_assign(self, client, admin_headers, job, developer, other_developer):
        response = await create_and_assign(client, admin_headers, job, [developer.id, other_developer.id])

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["job_id"] == str(job.id)
        assert data["notes"] == "Two week engagement"
        assert len(data["team"]["members"]) == 2

    @pytest.mark.asyncio
    async def test_list_for_job(self, client, admin_headers, job, developer, other_developer):
        await create_and_assign(client, admin_headers, job, [developer.id])
        await create_and_assign(client, admin_headers, job, [other_developer.id])

        response = await client.get(f"/v1/assignments/team/job/{job.id}", headers=admin_headers)

        assert response.status_code == 200
        assert len(response.json()["data"]) == 2


class TestTeamStatus:
    """Tests for team assignment status changes."""

    @pytest.mark.asyncio
    async def test_member_moves_team_assignment(self, client, admin_headers, job, developer, db_session):
        created = await create_and_assign(client, admin_headers, job, [developer.id])
        team_assignment_id = created.json()["data"]["id"]

        response = await client.patch(
            f"/v1/assignments/team/{team_assignment_id}/status",
            json={"status": "IN_PROGRESS"},
            headers=auth_headers(developer),
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "IN_PROGRESS"
        await db_session.refresh(job)
        assert job.status == JobStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_non_member_forbidden(self, client, admin_headers, job, developer, other_developer):
        created = await create_and_assign(client, admin_headers, job, [developer.id])
        team_assignment_id = created.json()["data"]["id"]

        response = await client.patch(
            f"/v1/assignments/team/{team_assignment_id}/status",
            json={"status": "IN_PROGRESS"},
            headers=auth_headers(other_developer),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_invalid_team_transition(self, client, admin_headers, job, developer):
        created = await create_and_assign(client, admin_headers, job, [developer.id])
        team_assignment_id = created.json()["data"]["id"]

        response = await client.patch(
            f"/v1/assignments/team/{team_assignment_id}/status",
            json={"status": "FAILED"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["details"]["allowed"] == ["IN_PROGRESS", "CANCELLED"]
