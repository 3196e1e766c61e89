"""Test application endpoints."""

import json

import pytest
from sqlalchemy import update

from app.models import User


async def apply(client, auth, world, **kwargs):
    return await client.post(
        f"/jobs/{world.job_id}/apply",
        headers=auth(world.seeker),
        data=kwargs.pop("data", {"cover_letter": "I would love to join."}),
        **kwargs,
    )


class TestApplyEndpoint:
    """Tests for POST /jobs/{job_id}/apply."""

    @pytest.mark.asyncio
    async def test_apply_creates_application(self, client, auth, world, mock_storage):
        response = await apply(
            client,
            auth,
            world,
            data={
                "cover_letter": "I would love to join.",
                "answers": json.dumps(
                    [{"question_id": "q1", "question": "Shifts?", "answer": "Nights"}]
                ),
            },
            files={"resume": ("cv.pdf", b"%PDF-1.4 test", "application/pdf")},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Application submitted"
        data = body["data"]
        assert data["attempt"] == 1
        assert data["warning"] is None
        assert data["application"]["status"] == "Applied"
        assert data["application"]["answers"][0]["answer"] == "Nights"
        assert data["application"]["cover_letter"]["text"] == "I would love to join."
        assert data["application"]["resume"]["filename"] == "cv.pdf"
        assert len(data["application"]["history"]) == 1
        mock_storage.upload.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_malformed_answers_are_ignored(self, client, auth, world):
        response = await apply(
            client, auth, world, data={"answers": "{not json"}
        )

        assert response.status_code == 201
        assert response.json()["data"]["application"]["answers"] == []

    @pytest.mark.asyncio
    async def test_requires_token(self, client, world):
        response = await client.post(f"/jobs/{world.job_id}/apply", data={})

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Access denied. No token provided."

    @pytest.mark.asyncio
    async def test_rejects_invalid_token(self, client, world):
        response = await client.post(
            f"/jobs/{world.job_id}/apply",
            headers={"Authorization": "Bearer not-a-token"},
            data={},
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token."

    @pytest.mark.asyncio
    async def test_deactivated_account(self, client, auth, world, session_factory):
        async with session_factory() as session:
            await session.execute(
                update(User).where(User.id == world.seeker.id).values(is_active=False)
            )
            await session.commit()

        response = await apply(client, auth, world)

        assert response.status_code == 403
        assert response.json()["message"] == "Account is deactivated."

    @pytest.mark.asyncio
    async def test_employer_cannot_apply(self, client, auth, world):
        response = await client.post(
            f"/jobs/{world.job_id}/apply", headers=auth(world.employer), data={}
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_duplicate_is_conflict(self, client, auth, world):
        await apply(client, auth, world)

        response = await apply(client, auth, world)

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "You have already applied to this job"
        assert "timestamp" in body

    @pytest.mark.asyncio
    async def test_unknown_job(self, client, auth, world):
        response = await client.post(
            "/jobs/9999/apply", headers=auth(world.seeker), data={}
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Job not open for applications"

    @pytest.mark.asyncio
    async def test_bad_attachment_is_validation_error(self, client, auth, world):
        response = await apply(
            client,
            auth,
            world,
            files={"resume": ("photo.png", b"\x89PNG", "image/png")},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert body["errors"][0]["field"] == "resume"

    @pytest.mark.asyncio
    async def test_reapply_returns_warning(self, client, auth, world):
        first = await apply(client, auth, world)
        application_id = first.json()["data"]["application"]["id"]
        await client.patch(
            f"/applications/{application_id}/withdraw", headers=auth(world.seeker)
        )

        response = await apply(client, auth, world)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Application resubmitted"
        assert body["data"]["attempt"] == 2
        assert body["data"]["warning"].startswith("This is your final application attempt")


class TestApplicationManagement:
    """Tests for status, withdraw and rating endpoints."""

    async def _submitted(self, client, auth, world) -> int:
        response = await apply(client, auth, world)
        return response.json()["data"]["application"]["id"]

    @pytest.mark.asyncio
    async def test_status_update_and_hire_counter(self, client, auth, world):
        application_id = await self._submitted(client, auth, world)

        response = await client.patch(
            f"/applications/{application_id}/status",
            headers=auth(world.employer),
            json={"status": "Offered", "note": "Great fit"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "Offered"
        assert data["history"][-1]["note"] == "Great fit"

        stats = await client.get("/employers/me/stats", headers=auth(world.employer))
        assert stats.json()["data"]["total_hires"] == 1
        assert stats.json()["data"]["total_applications"] == 1

    @pytest.mark.asyncio
    async def test_unknown_status_value(self, client, auth, world):
        application_id = await self._submitted(client, auth, world)

        response = await client.patch(
            f"/applications/{application_id}/status",
            headers=auth(world.employer),
            json={"status": "Hired"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert body["errors"][0]["field"] == "status"

    @pytest.mark.asyncio
    async def test_status_cannot_withdraw(self, client, auth, world):
        application_id = await self._submitted(client, auth, world)

        response = await client.patch(
            f"/applications/{application_id}/status",
            headers=auth(world.employer),
            json={"status": "Withdrawn"},
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "status"

    @pytest.mark.asyncio
    async def test_seeker_cannot_update_status(self, client, auth, world):
        application_id = await self._submitted(client, auth, world)

        response = await client.patch(
            f"/applications/{application_id}/status",
            headers=auth(world.seeker),
            json={"status": "Offered"},
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_other_employer_cannot_update_status(self, client, auth, world):
        application_id = await self._submitted(client, auth, world)

        response = await client.patch(
            f"/applications/{application_id}/status",
            headers=auth(world.other_employer),
            json={"status": "Interview"},
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_withdraw_with_note(self, client, auth, world):
        application_id = await self._submitted(client, auth, world)

        response = await client.patch(
            f"/applications/{application_id}/withdraw",
            headers=auth(world.seeker),
            json={"note": "Moved cities"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "Withdrawn"
        assert data["history"][-1]["note"] == "Moved cities"

        again = await client.patch(
            f"/applications/{application_id}/withdraw", headers=auth(world.seeker)
        )
        assert again.status_code == 409

    @pytest.mark.asyncio
    async def test_rating(self, client, auth, world):
        application_id = await self._submitted(client, auth, world)

        bad = await client.patch(
            f"/applications/{application_id}/rating",
            headers=auth(world.employer),
            json={"rating": 7},
        )
        assert bad.status_code == 400
        assert bad.json()["errors"][0]["field"] == "rating"

        good = await client.patch(
            f"/applications/{application_id}/rating",
            headers=auth(world.admin),
            json={"rating": 4},
        )
        assert good.status_code == 200
        assert good.json()["data"]["rating"] == 4


class TestApplicationReads:
    """Tests for listing and detail endpoints."""

    @pytest.mark.asyncio
    async def test_seeker_lists_own_applications(self, client, auth, world):
        await apply(client, auth, world)

        response = await client.get("/applications/me", headers=auth(world.seeker))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 1
        assert data["pages"] == 1
        assert data["items"][0]["job"]["title"] == "Registered Nurse"

    @pytest.mark.asyncio
    async def test_status_filter(self, client, auth, world):
        await apply(client, auth, world)

        response = await client.get(
            "/applications/me?status=Rejected", headers=auth(world.seeker)
        )

        assert response.json()["data"]["total"] == 0

    @pytest.mark.asyncio
    async def test_limit_is_bounded(self, client, auth, world):
        response = await client.get(
            "/applications/employer?limit=500", headers=auth(world.employer)
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_employer_detail_marks_viewed(self, client, auth, world):
        created = await apply(client, auth, world)
        application_id = created.json()["data"]["application"]["id"]

        response = await client.get(
            f"/applications/{application_id}", headers=auth(world.employer)
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["is_viewed_by_employer"] is True
        assert data["job"]["id"] == world.job_id

    @pytest.mark.asyncio
    async def test_job_listing_requires_ownership(self, client, auth, world):
        await apply(client, auth, world)

        own = await client.get(
            f"/applications/job/{world.job_id}", headers=auth(world.employer)
        )
        other = await client.get(
            f"/applications/job/{world.job_id}", headers=auth(world.other_employer)
        )

        assert own.status_code == 200
        assert len(own.json()["data"]) == 1
        assert other.status_code == 403

    @pytest.mark.asyncio
    async def test_missing_application(self, client, auth, world):
        response = await client.get("/applications/4242", headers=auth(world.admin))

        assert response.status_code == 404
        assert response.json()["message"] == "Application not found"
