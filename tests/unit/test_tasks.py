"""Tests for background queue tasks."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import NotFoundError
from app.services.stats_service import EmployerStats
from app.tasks import _resync_async, enqueue_stats_resync, process_stats_resync


class TestEnqueueStatsResync:
    """Tests for enqueueing."""

    @patch("app.tasks.lifemate_queue")
    def test_enqueues_single_employer(self, mock_queue):
        mock_queue.enqueue.return_value = MagicMock(id="job-1")

        job = enqueue_stats_resync(5)

        assert job.id == "job-1"
        args, kwargs = mock_queue.enqueue.call_args
        assert args == (process_stats_resync, 5)
        assert kwargs["description"] == "Resync stats for employer 5"

    @patch("app.tasks.lifemate_queue")
    def test_enqueues_all_employers(self, mock_queue):
        enqueue_stats_resync()

        args, kwargs = mock_queue.enqueue.call_args
        assert args == (process_stats_resync, None)
        assert kwargs["description"] == "Resync stats for all employers"


class TestProcessStatsResync:
    """Tests for the worker entrypoint."""

    @patch("app.tasks._resync_async", new_callable=AsyncMock)
    def test_completed(self, mock_resync):
        mock_resync.return_value = {"employer_id": None, "repaired": 4}

        result = process_stats_resync()

        assert result["status"] == "completed"
        assert result["repaired"] == 4
        mock_resync.assert_awaited_once_with(None)

    @patch("app.tasks._resync_async", new_callable=AsyncMock)
    def test_unknown_employer(self, mock_resync):
        mock_resync.side_effect = NotFoundError("Employer not found")

        result = process_stats_resync(99)

        assert result["status"] == "error"
        assert result["employer_id"] == 99
        assert result["error_detail"] == "Employer not found"

    @patch("app.tasks._resync_async", new_callable=AsyncMock)
    def test_database_error(self, mock_resync):
        mock_resync.side_effect = OperationalError("SELECT 1", {}, Exception("gone"))

        assert process_stats_resync(1)["status"] == "error"


class TestResyncAsync:
    """Tests for the async resync helper."""

    @pytest.mark.asyncio
    @patch("app.tasks.engine")
    @patch("app.tasks.EmployerStatsService")
    async def test_single_employer(self, mock_service_cls, mock_engine):
        mock_engine.dispose = AsyncMock()
        service = mock_service_cls.return_value
        service.resync = AsyncMock(return_value=EmployerStats(total_job_posts=2))

        result = await _resync_async(7)

        service.resync.assert_awaited_once_with(7)
        assert result["stats"]["total_job_posts"] == 2
        mock_engine.dispose.assert_awaited_once()

    @pytest.mark.asyncio
    @patch("app.tasks.engine")
    @patch("app.tasks.EmployerStatsService")
    async def test_all_employers(self, mock_service_cls, mock_engine):
        mock_engine.dispose = AsyncMock()
        service = mock_service_cls.return_value
        service.resync_all = AsyncMock(return_value=5)

        result = await _resync_async(None)

        assert result == {"employer_id": None, "repaired": 5}
        mock_engine.dispose.assert_awaited_once()
