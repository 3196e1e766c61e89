"""Test employer statistics and admin endpoints."""

from unittest.mock import MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError


class TestEmployerStatsEndpoints:
    """Tests for /employers routes."""

    @pytest.mark.asyncio
    async def test_my_stats(self, client, auth, world):
        response = await client.get("/employers/me/stats", headers=auth(world.employer))

        assert response.status_code == 200
        assert response.json()["data"] == {
            "total_job_posts": 0,
            "active_job_posts": 0,
            "total_applications": 0,
            "total_hires": 0,
        }

    @pytest.mark.asyncio
    async def test_my_stats_requires_employer(self, client, auth, world):
        response = await client.get("/employers/me/stats", headers=auth(world.seeker))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_owner_resync(self, client, auth, world):
        response = await client.post(
            f"/employers/{world.employer_id}/stats/resync", headers=auth(world.employer)
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_job_posts"] == 1
        assert data["active_job_posts"] == 1

    @pytest.mark.asyncio
    async def test_other_employer_cannot_resync(self, client, auth, world):
        response = await client.post(
            f"/employers/{world.employer_id}/stats/resync",
            headers=auth(world.other_employer),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_resync_any(self, client, auth, world):
        response = await client.post(
            f"/employers/{world.other_employer_id}/stats/resync",
            headers=auth(world.admin),
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_admin_resync_unknown_employer(self, client, auth, world):
        response = await client.post(
            "/employers/999/stats/resync", headers=auth(world.admin)
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Employer not found"


class TestAdminEndpoints:
    """Tests for /admin routes."""

    @pytest.mark.asyncio
    @patch("app.routers.employers.enqueue_stats_resync")
    async def test_full_resync_is_queued(self, mock_enqueue, client, auth, world):
        mock_enqueue.return_value = MagicMock(id="rq-job-1")

        response = await client.post("/admin/stats/resync", headers=auth(world.admin))

        assert response.status_code == 202
        assert response.json()["data"] == {"job_id": "rq-job-1", "employer_id": None}
        mock_enqueue.assert_called_once_with(None)

    @pytest.mark.asyncio
    @patch("app.routers.employers.enqueue_stats_resync")
    async def test_queue_outage_uses_envelope(self, mock_enqueue, client, auth, world):
        mock_enqueue.side_effect = RedisConnectionError("Connection refused")

        response = await client.post("/admin/stats/resync", headers=auth(world.admin))

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Internal server error"
        assert "Connection refused" not in response.text
        assert "timestamp" in body

    @pytest.mark.asyncio
    async def test_full_resync_requires_admin(self, client, auth, world):
        response = await client.post("/admin/stats/resync", headers=auth(world.employer))

        assert response.status_code == 403


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["service"] == "lifemate"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_envelope(self, client):
        response = await client.get("/nope")

        assert response.status_code == 404
        assert response.json()["success"] is False
