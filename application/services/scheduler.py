import asyncio
import logging

from application.services.refresh import RefreshCoordinator

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """
    Fires a refresh cycle every ``interval_seconds``.

    Triggers are fixed-rate: a tick does not wait for the previous cycle, and
    the coordinator drops the tick if that cycle is still running.
    """

    def __init__(self, coordinator: RefreshCoordinator, interval_seconds: int, run_on_start: bool = True):
        self.coordinator = coordinator
        self.interval_seconds = interval_seconds
        self.run_on_start = run_on_start
        self.is_running = False
        self._cycles: set[asyncio.Task] = set()

        logger.info(f"Refresh interval: {interval_seconds} seconds")

    def trigger(self) -> asyncio.Task:
        task = asyncio.create_task(self.coordinator.run_cycle(), name="refresh-cycle")
        self._cycles.add(task)
        task.add_done_callback(self._cycle_done)
        return task

    def _cycle_done(self, task: asyncio.Task) -> None:
        self._cycles.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.critical(f"Refresh cycle failed: {error}", exc_info=error)

    async def run(self) -> None:
        self.is_running = True
        logger.info("Refresh scheduler started")

        loop = asyncio.get_running_loop()
        next_fire = loop.time() + (0 if self.run_on_start else self.interval_seconds)
        cycle_count = 0
        while self.is_running:
            try:
                await asyncio.sleep(max(0.0, next_fire - loop.time()))
                if not self.is_running:
                    break
                cycle_count += 1
                logger.info(f"Triggering refresh cycle #{cycle_count}")
                self.trigger()
                next_fire += self.interval_seconds
            except asyncio.CancelledError:
                logger.info("Refresh scheduler received cancellation signal")
                break

        logger.info("Refresh scheduler stopped")

    async def stop(self) -> None:
        """Stop scheduling and cancel any cycle still in flight."""
        self.is_running = False
        cycles = list(self._cycles)
        for task in cycles:
            task.cancel()
        await asyncio.gather(*cycles, return_exceptions=True)
