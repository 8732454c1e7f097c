"""
Tests for the profile API endpoints.
"""

import pytest

from app.models import UserRole
from tests.conftest import auth_headers
from tests.fixtures.test_data import generate_user


@pytest.fixture
async def newcomer(db_session):
    """Developer without a profile yet."""
    user = generate_user(UserRole.DEVELOPER)
    db_session.add(user)
    await db_session.commit()
    return user


class TestProfile:
    """Tests for reading and updating the profile."""

    @pytest.mark.asyncio
    async def test_get_profile(self, client, developer, developer_headers):
        response = await client.get("/v1/profile", headers=developer_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user_id"] == str(developer.id)
        assert data["skills"] == ["Python", "FastAPI"]

    @pytest.mark.asyncio
    async def test_missing_profile(self, client, newcomer):
        response = await client.get("/v1/profile", headers=auth_headers(newcomer))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_first_write_creates_profile(self, client, newcomer):
        headers = auth_headers(newcomer)

        response = await client.put(
            "/v1/profile/skills",
            json={"skills": [" Go ", "go", "Rust", ""]},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["skills"] == ["Go", "Rust"]
        fetched = await client.get("/v1/profile", headers=headers)
        assert fetched.status_code == 200

    @pytest.mark.asyncio
    async def test_availability_round_trip(self, client, developer_headers):
        payload = {
            "available": False,
            "hours": "9-5",
            "timezone": "Europe/Berlin",
            "notice_period": "2 weeks",
            "max_hours_per_week": 30,
            "current_weekly_hours": 10,
        }

        updated = await client.put("/v1/profile/availability", json=payload, headers=developer_headers)
        fetched = await client.get("/v1/profile/availability", headers=developer_headers)

        assert updated.status_code == 200
        assert fetched.json()["data"]["timezone"] == "Europe/Berlin"
        assert fetched.json()["data"]["max_hours_per_week"] == 30

    @pytest.mark.asyncio
    async def test_availability_bounds(self, client, developer_headers):
        response = await client.put(
            "/v1/profile/availability",
            json={"max_hours_per_week": 200},
            headers=developer_headers,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_education_and_certifications(self, client, developer_headers):
        education = await client.put(
            "/v1/profile/education",
            json={"degree": "BSc Computer Science", "institution": "TU Delft", "graduation_year": 2019},
            headers=developer_headers,
        )
        assert education.status_code == 200

        added = await client.post(
            "/v1/profile/certifications",
            json={"name": "AWS Solutions Architect", "issuer": "Amazon"},
            headers=developer_headers,
        )
        assert added.status_code == 201
        certification_id = added.json()["data"]["id"]

        profile = await client.get("/v1/profile", headers=developer_headers)
        stored = profile.json()["data"]["education"]
        assert stored["degree"] == "BSc Computer Science"
        assert [c["id"] for c in stored["certifications"]] == [certification_id]

        removed = await client.delete(f"/v1/profile/certifications/{certification_id}", headers=developer_headers)
        assert removed.status_code == 200
        again = await client.delete(f"/v1/profile/certifications/{certification_id}", headers=developer_headers)
        assert again.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.get("/v1/profile")
        assert response.status_code == 401


class TestPortfolio:
    """Tests for portfolio link management."""

    @pytest.mark.asyncio
    async def test_add_update_remove(self, client, developer_headers):
        added = await client.post(
            "/v1/profile/portfolio",
            json={"label": "GitHub", "url": "https://github.com/example"},
            headers=developer_headers,
        )
        assert added.status_code == 201
        link_id = added.json()["data"]["id"]

        updated = await client.put(
            f"/v1/profile/portfolio/{link_id}",
            json={"label": "GitHub", "url": "https://github.com/example-dev", "description": "Main account"},
            headers=developer_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["id"] == link_id

        links = await client.get("/v1/profile/portfolio", headers=developer_headers)
        assert [l["url"] for l in links.json()["data"]] == ["https://github.com/example-dev"]

        removed = await client.delete(f"/v1/profile/portfolio/{link_id}", headers=developer_headers)
        assert removed.status_code == 200
        links = await client.get("/v1/profile/portfolio", headers=developer_headers)
        assert links.json()["data"] == []

    @pytest.mark.asyncio
    async def test_rejects_non_http_urls(self, client, developer_headers):
        response = await client.post(
            "/v1/profile/portfolio",
            json={"label": "FTP", "url": "ftp://example.com"},
            headers=developer_headers,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_label_length(self, client, developer_headers):
        response = await client.post(
            "/v1/profile/portfolio",
            json={"label": "x" * 51, "url": "https://example.com"},
            headers=developer_headers,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_link_limit(self, client, developer_headers):
        for i in range(10):
            response = await client.post(
                "/v1/profile/portfolio",
                json={"label": f"Project {i}", "url": f"https://example.com/{i}"},
                headers=developer_headers,
            )
            assert response.status_code == 201

        overflow = await client.post(
            "/v1/profile/portfolio",
            json={"label": "One more", "url": "https://example.com/11"},
            headers=developer_headers,
        )
        assert overflow.status_code == 400
        assert overflow.json()["details"]["max_links"] == 10

    @pytest.mark.asyncio
    async def test_unknown_link(self, client, developer_headers):
        response = await client.delete("/v1/profile/portfolio/does-not-exist", headers=developer_headers)
        assert response.status_code == 404
