"""In-process dispatcher for best-effort side effects (emails, notifications)."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from app.core.config import settings

logger = logging.getLogger(__name__)


class SideEffectDispatcher:
    """Runs side effects as background tasks with retry and backoff.

    ``submit`` returns immediately; failures are logged and never reach the
    caller that triggered them.
    """

    def __init__(
        self,
        max_retries: int = settings.side_effect_max_retries,
        base_delay: float = settings.side_effect_base_delay,
    ):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self._tasks: set[asyncio.Task] = set()
        self.failed_count = 0

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(
        self,
        name: str,
        func: Callable[..., Awaitable[Any]],
        *args,
        **kwargs,
    ) -> asyncio.Task:
        """Schedule ``func(*args, **kwargs)`` without waiting for it."""
        task = asyncio.create_task(self._run(name, func, args, kwargs), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(
        self,
        name: str,
        func: Callable[..., Awaitable[Any]],
        args: tuple,
        kwargs: dict,
    ) -> Any:
        attempt = 0
        while True:
            try:
                return await func(*args, **kwargs)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                if attempt >= self.max_retries:
                    self.failed_count += 1
                    logger.error(
                        f"Side effect '{name}' failed after {attempt + 1} attempts: {e}"
                    )
                    return None
                delay = self.base_delay * (2**attempt)
                attempt += 1
                logger.warning(
                    f"Side effect '{name}' failed ({e}), "
                    f"retry {attempt}/{self.max_retries} in {delay:.1f}s"
                )
                await asyncio.sleep(delay)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for every pending side effect to finish."""
        while self._tasks:
            pending = list(self._tasks)
            done, not_done = await asyncio.wait(pending, timeout=timeout)
            if not_done:
                logger.warning(f"{len(not_done)} side effects still running, cancelling")
                for task in not_done:
                    task.cancel()
                await asyncio.gather(*not_done, return_exceptions=True)
                return


side_effects = SideEffectDispatcher()
