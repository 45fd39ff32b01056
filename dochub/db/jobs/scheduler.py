"""Job scheduler for background tasks."""

import asyncio
import time
from collections.abc import Callable, Coroutine
from typing import Any

from dochub.lib.logging import get_logger

logger = get_logger(__name__)


class JobScheduler:
    """
    Simple job scheduler for running periodic background tasks.

    Each registered job runs immediately on start and then every
    ``interval_seconds``.
    """

    def __init__(self) -> None:
        self._running = False
        self._tasks: list[asyncio.Task[None]] = []
        self._jobs: dict[str, dict[str, Any]] = {}

    @property
    def running(self) -> bool:
        return self._running

    def register_job(
        self,
        name: str,
        job_func: Callable[[], Coroutine[Any, Any, Any]],
        interval_seconds: float,
    ) -> None:
        """
        Register a job with the scheduler.

        Args:
            name: Unique job name
            job_func: Async function to execute
            interval_seconds: Pause between the start of two runs
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self._jobs[name] = {
            "func": job_func,
            "interval_seconds": interval_seconds,
            "last_run": None,
        }

        logger.info("job_registered", job_name=name, interval_seconds=interval_seconds)

    async def start(self) -> None:
        """Start the scheduler."""
        if self._running:
            logger.warning("scheduler_already_running")
            return

        self._running = True
        logger.info("scheduler_started", job_count=len(self._jobs))

        for name, job_config in self._jobs.items():
            task = asyncio.create_task(self._run_job_loop(name, job_config))
            self._tasks.append(task)

    async def stop(self) -> None:
        """Stop the scheduler and cancel all running tasks."""
        if not self._running:
            return

        self._running = False

        for task in self._tasks:
            task.cancel()

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

        self._tasks.clear()
        logger.info("scheduler_stopped")

    async def _run_job_loop(self, name: str, job_config: dict[str, Any]) -> None:
        """Run a job in a loop based on its interval."""
        while self._running:
            try:
                if job_config["last_run"] is not None:
                    elapsed = time.monotonic() - job_config["last_run"]
                    wait_seconds = max(0.0, job_config["interval_seconds"] - elapsed)
                    if wait_seconds > 0:
                        logger.debug("job_waiting", job_name=name, wait_seconds=wait_seconds)
                        await asyncio.sleep(wait_seconds)

                if not self._running:
                    break

                await self._execute(name, job_config)

            except asyncio.CancelledError:
                logger.debug("job_cancelled", job_name=name)
                break

    async def _execute(self, name: str, job_config: dict[str, Any]) -> Any:
        logger.info("job_executing", job_name=name)
        start = time.monotonic()
        result = None

        try:
            result = await job_config["func"]()
            logger.info(
                "job_completed",
                job_name=name,
                duration_ms=round((time.monotonic() - start) * 1000, 2),
                result=result,
            )
        except Exception as e:
            logger.error(
                "job_failed",
                job_name=name,
                duration_ms=round((time.monotonic() - start) * 1000, 2),
                error=str(e),
            )

        job_config["last_run"] = start
        return result

    async def run_job_now(self, name: str) -> Any:
        """
        Manually trigger a job to run immediately.

        Raises:
            KeyError: If job not found
        """
        if name not in self._jobs:
            raise KeyError(f"Job not found: {name}")

        logger.info("job_manual_trigger", job_name=name)
        job_config = self._jobs[name]
        result = await job_config["func"]()
        job_config["last_run"] = time.monotonic()
        return result


__all__ = ["JobScheduler"]
