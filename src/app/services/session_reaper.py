"""
Session Reaper

Optional background task that runs the retention purge periodically.
Expiry itself is evaluated lazily on every read, so nothing depends on
the reaper having run.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import AsyncContextManager, Callable, Optional

from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sessions import PurgeExpiredSessionsUseCase
from src.domain.base import utcnow

logger = logging.getLogger(__name__)


class SessionReaper:
    def __init__(
        self,
        uow_scope: Callable[[], AsyncContextManager[UnitOfWork]],
        interval_seconds: float,
        retention: timedelta,
        clock: Callable[[], datetime] = utcnow,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.uow_scope = uow_scope
        self.interval_seconds = interval_seconds
        self.retention = retention
        self.clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        async with self.uow_scope() as uow:
            use_case = PurgeExpiredSessionsUseCase(uow, self.retention, self.clock)
            result = await use_case.execute()
        return result.value.purged_count

    async def _loop(self):
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.run_once()
            except Exception:
                # Keep the loop alive; the next tick retries
                logger.exception("Session reaper run failed")

    def start(self):
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Session reaper started: interval={self.interval_seconds}s")

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Session reaper stopped")
