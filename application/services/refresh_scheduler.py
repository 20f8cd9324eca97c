import asyncio
import contextlib
import logging

from application.services.rate_resolver import RateResolver

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """
    Drives periodic resolution cycles for a RateResolver.

    One asyncio task runs at a time. The loop awaits each cycle before
    sleeping again, so its own cycles never overlap; cycles forced from
    outside are serialized by the resolver's lock.
    """

    def __init__(self, resolver: RateResolver, interval_ms: int = 30_000):
        self.resolver = resolver
        self.interval_ms = interval_ms
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Resolve once immediately, then keep resolving every interval."""
        try:
            await self.resolver.resolve()
        except Exception:
            logger.exception("Initial rate resolution failed")

        if self.resolver.current_rate is None:
            self.resolver.apply_fallback()

        self._schedule()

    def restart(self, interval_ms: int) -> None:
        self.interval_ms = interval_ms
        self._schedule()
        logger.info(f"Refresh interval set to {interval_ms}ms")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    def _schedule(self) -> None:
        if self._task is not None:
            self._task.cancel()
        self._task = asyncio.create_task(self._run(self.interval_ms / 1000))

    async def _run(self, interval_seconds: float) -> None:
        cycle_count = 0
        while True:
            await asyncio.sleep(interval_seconds)
            cycle_count += 1
            try:
                await self.resolver.resolve()
            except Exception:
                # Log and keep polling
                logger.exception(f"Refresh cycle #{cycle_count} failed")
