"""
Tests for the scoring API: job scoring, configs, runs and performance.
"""

import pytest
from datetime import datetime, timedelta
from uuid import uuid4

from app.config import get_settings
from app.models import AssignmentStatus, JobAssignment, UserRole
from app.schemas.scoring import ScoreJobRequest
from tests.conftest import auth_headers
from tests.fixtures.test_data import generate_job, generate_profile, generate_user


async def score(client, headers, job, **extra):
    return await client.post(
        "/v1/scoring/score-job",
        json={"job_id": str(job.id), **extra},
        headers=headers,
    )


class TestScoreJob:
    """Tests for POST /v1/scoring/score-job."""

    @pytest.mark.asyncio
    async def test_score_job_ranks_matching_developers(self, client, admin_headers, job, developer, other_developer):
        response = await score(client, admin_headers, job)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["run_id"] is not None
        assert data["algorithm"] == "DEFAULT"
        assert data["total_candidates"] == 2
        assert data["weights"]["performance"] == pytest.approx(0.35)

        # The React developer falls below the skill-match cutoff
        results = data["results"]
        assert [r["developer_id"] for r in results] == [str(developer.id)]
        assert results[0]["rank"] == 1
        assert results[0]["breakdown"]["skill_match"] == pytest.approx(0.8 * 0.7)
        assert results[0]["developer"]["email"] == developer.email

    @pytest.mark.asyncio
    async def test_run_is_persisted(self, client, admin_headers, admin_user, job, developer):
        scored = await score(client, admin_headers, job)
        run_id = scored.json()["data"]["run_id"]

        response = await client.get(f"/v1/scoring/runs/{run_id}", headers=admin_headers)

        assert response.status_code == 200
        run = response.json()["data"]
        assert run["job_id"] == str(job.id)
        assert run["triggered_by"] == str(admin_user.id)
        assert [s["developer_id"] for s in run["scores"]] == [str(developer.id)]
        assert run["scores"][0]["rank"] == 1

        runs = await client.get(f"/v1/scoring/runs?job_id={job.id}", headers=admin_headers)
        assert [r["id"] for r in runs.json()["data"]] == [run_id]

    @pytest.mark.asyncio
    async def test_inactive_developers_excluded_by_default(self, client, admin_headers, db_session, job, developer):
        dormant = generate_user(UserRole.DEVELOPER, last_login_at=datetime.utcnow() - timedelta(days=120))
        db_session.add(dormant)
        db_session.add(generate_profile(dormant, skills=["Python"]))
        await db_session.commit()

        default = await score(client, admin_headers, job)
        inclusive = await score(client, admin_headers, job, include_inactive_users=True)

        assert default.json()["data"]["total_candidates"] == 1
        assert inclusive.json()["data"]["total_candidates"] == 2
        assert len(inclusive.json()["data"]["results"]) == 2

    @pytest.mark.asyncio
    async def test_ranking_prefers_track_record(self, client, admin_headers, db_session, client_user, job, developer):
        rival = generate_user(UserRole.DEVELOPER)
        db_session.add(rival)
        db_session.add(generate_profile(rival, skills=["Python"]))
        past_job = generate_job(client_user)
        db_session.add(past_job)
        await db_session.flush()
        db_session.add(JobAssignment(
            job_id=past_job.id,
            developer_id=rival.id,
            assigned_by=rival.id,
            status=AssignmentStatus.COMPLETED,
        ))
        await db_session.commit()

        response = await score(client, admin_headers, job)

        results = response.json()["data"]["results"]
        assert [r["developer_id"] for r in results] == [str(rival.id), str(developer.id)]
        assert [r["rank"] for r in results] == [1, 2]
        assert results[0]["breakdown"]["performance"] == pytest.approx(1.0, abs=1e-3)

    @pytest.mark.asyncio
    async def test_min_score_and_limit(self, client, admin_headers, job, developer):
        none_left = await score(client, admin_headers, job, min_score=0.99)
        assert none_left.json()["data"]["results"] == []

        invalid = await score(client, admin_headers, job, limit=0)
        assert invalid.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_job(self, client, admin_headers):
        response = await client.post(
            "/v1/scoring/score-job", json={"job_id": str(uuid4())}, headers=admin_headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_developers_cannot_score(self, client, developer_headers, job):
        response = await score(client, developer_headers, job)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_recommendations_do_not_persist(self, client, client_headers, job, developer):
        response = await client.get(f"/v1/scoring/recommendations/{job.id}", headers=client_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["run_id"] is None
        assert [r["developer_id"] for r in data["results"]] == [str(developer.id)]

        runs = await client.get("/v1/scoring/runs", headers=client_headers)
        assert runs.json()["data"] == []


class TestScoringConfigs:
    """Tests for scoring configuration management."""

    @pytest.mark.asyncio
    async def test_active_config_created_lazily(self, client, admin_headers):
        response = await client.get("/v1/scoring/configs/active", headers=admin_headers)

        assert response.status_code == 200
        config = response.json()["data"]
        assert config["name"] == "Default"
        assert config["is_active"] is True
        assert config["weights"] == {
            "skill_match": 0.30,
            "performance": 0.35,
            "availability": 0.20,
            "workload": 0.10,
            "priority": 0.05,
        }

    @pytest.mark.asyncio
    async def test_activating_config_deactivates_others(self, client, admin_headers):
        default = await client.get("/v1/scoring/configs/active", headers=admin_headers)

        created = await client.post(
            "/v1/scoring/configs",
            json={
                "name": "Skills first",
                "algorithm": "LINEAR",
                "weights": {"skill_match": 0.6, "performance": 0.2, "availability": 0.1, "workload": 0.05, "priority": 0.05},
                "is_active": True,
            },
            headers=admin_headers,
        )
        assert created.status_code == 201

        configs = await client.get("/v1/scoring/configs", headers=admin_headers)
        active = [c["id"] for c in configs.json()["data"] if c["is_active"]]
        assert active == [created.json()["data"]["id"]]

        current = await client.get("/v1/scoring/configs/active", headers=admin_headers)
        assert current.json()["data"]["algorithm"] == "LINEAR"
        assert current.json()["data"]["id"] != default.json()["data"]["id"]

    @pytest.mark.asyncio
    async def test_score_job_uses_active_config(self, client, admin_headers, job, developer):
        created = await client.post(
            "/v1/scoring/configs",
            json={"name": "Linear", "algorithm": "LINEAR", "is_active": True},
            headers=admin_headers,
        )

        response = await score(client, admin_headers, job)

        data = response.json()["data"]
        assert data["config_id"] == created.json()["data"]["id"]
        assert data["algorithm"] == "LINEAR"

    @pytest.mark.asyncio
    async def test_update_and_delete_config(self, client, admin_headers):
        created = await client.post(
            "/v1/scoring/configs",
            json={"name": "Draft"},
            headers=admin_headers,
        )
        config_id = created.json()["data"]["id"]
        assert created.json()["data"]["is_active"] is False

        updated = await client.patch(
            f"/v1/scoring/configs/{config_id}",
            json={"description": "Tuned", "weights": {"skill_match": 0.5}, "is_active": True},
            headers=admin_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["description"] == "Tuned"
        assert updated.json()["data"]["weights"]["skill_match"] == 0.5
        assert updated.json()["data"]["is_active"] is True

        deleted = await client.delete(f"/v1/scoring/configs/{config_id}", headers=admin_headers)
        assert deleted.status_code == 200
        assert deleted.json()["data"]["is_active"] is False

        fetched = await client.get(f"/v1/scoring/configs/{config_id}", headers=admin_headers)
        assert fetched.status_code == 200

    @pytest.mark.asyncio
    async def test_unknown_config(self, client, admin_headers):
        response = await client.get(f"/v1/scoring/configs/{uuid4()}", headers=admin_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_configs_require_admin(self, client, client_headers):
        response = await client.post("/v1/scoring/configs", json={"name": "x"}, headers=client_headers)
        assert response.status_code == 403


class TestDeveloperPerformance:
    """Tests for the per-developer performance cache."""

    @pytest.mark.asyncio
    async def test_refresh_and_read(self, client, admin_headers, db_session, job, developer):
        db_session.add(JobAssignment(
            job_id=job.id, developer_id=developer.id, assigned_by=developer.id,
            status=AssignmentStatus.COMPLETED,
        ))
        db_session.add(JobAssignment(
            job_id=job.id, developer_id=developer.id, assigned_by=developer.id,
            status=AssignmentStatus.FAILED,
        ))
        await db_session.commit()

        refreshed = await client.post(f"/v1/scoring/performance/{developer.id}", headers=admin_headers)
        assert refreshed.status_code == 200
        metric = refreshed.json()["data"]
        assert metric["completed_count"] == 1
        assert metric["failed_count"] == 1
        assert metric["cancelled_count"] == 0
        assert metric["on_time_rate"] == 1.0

        own = await client.get(f"/v1/scoring/performance/{developer.id}", headers=auth_headers(developer))
        assert own.status_code == 200
        assert own.json()["data"]["completed_count"] == 1

    @pytest.mark.asyncio
    async def test_missing_metric(self, client, admin_headers, developer):
        response = await client.get(f"/v1/scoring/performance/{developer.id}", headers=admin_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_developers_only_see_themselves(self, client, developer, other_developer):
        response = await client.get(
            f"/v1/scoring/performance/{other_developer.id}", headers=auth_headers(developer)
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_refresh_unknown_developer(self, client, admin_headers, client_user):
        response = await client.post(f"/v1/scoring/performance/{client_user.id}", headers=admin_headers)
        assert response.status_code == 404


class TestScoreJobDefaults:
    """Tests for request defaults taken from settings."""

    def test_limit_defaults_to_setting(self):
        request = ScoreJobRequest(job_id=uuid4())
        assert request.limit == get_settings().scoring_default_limit
