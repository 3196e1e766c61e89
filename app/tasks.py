"""Background tasks for LifeMate.

Offline repair of employer statistics runs on an RQ (Redis Queue) worker so
admins can trigger a full recount without holding an HTTP request open.
"""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

from redis import Redis
from rq import Queue, Worker
from rq.job import Job
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.core.storage import engine
from app.services.stats_service import EmployerStatsService

# Redis connection and queue setup
redis_conn = Redis.from_url(settings.redis_url)
lifemate_queue = Queue("lifemate", connection=redis_conn)

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(UTC).isoformat()


def enqueue_stats_resync(employer_id: int | None = None) -> Job:
    """Enqueue a stats resync for one employer, or for all when ``employer_id`` is None.

    Returns:
        RQ Job object for tracking status
    """
    target = f"employer {employer_id}" if employer_id is not None else "all employers"
    logger.info(f"Enqueueing stats resync for {target}")

    return lifemate_queue.enqueue(
        process_stats_resync,
        employer_id,
        job_timeout="30m",
        description=f"Resync stats for {target}",
    )


def process_stats_resync(employer_id: int | None = None) -> dict[str, Any]:
    """Recount employer statistics in the RQ worker process."""
    try:
        result = asyncio.run(_resync_async(employer_id))
    except (SQLAlchemyError, NotFoundError) as e:
        logger.error(f"Stats resync failed for employer {employer_id}: {e}")
        return {
            "status": "error",
            "employer_id": employer_id,
            "error_detail": str(e),
            "timestamp": _timestamp(),
        }

    logger.info(f"Stats resync completed: {result}")
    return {"status": "completed", **result, "timestamp": _timestamp()}


async def _resync_async(employer_id: int | None) -> dict[str, Any]:
    stats = EmployerStatsService()
    try:
        if employer_id is None:
            repaired = await stats.resync_all()
            return {"employer_id": None, "repaired": repaired}

        recounted = await stats.resync(employer_id)
        return {"employer_id": employer_id, "repaired": 1, "stats": recounted.as_dict()}
    finally:
        # Pooled connections are bound to this event loop
        await engine.dispose()


def start_worker(burst: bool = False):
    """Start an RQ worker for LifeMate tasks.

    Args:
        burst: If True, worker will exit when queue is empty
    """
    logger.info("Starting LifeMate worker")

    worker = Worker(
        [lifemate_queue],
        connection=redis_conn,
        name="lifemate-worker",
    )

    worker.work(burst=burst)


if __name__ == "__main__":
    import sys

    logging.basicConfig(level=logging.INFO)
    start_worker(burst="--burst" in sys.argv)
