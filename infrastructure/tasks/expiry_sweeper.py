"""
Periodic expiry sweep for payment sessions.

Runs inside the application's event loop (the session store is in-memory and
process-local, so an out-of-process scheduler could not reach it). Each run
takes the store lock, expires every overdue active session and reports how
many it transitioned.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from application.services.payment_session_service import Clock, utcnow
from core.logging_config import get_logger
from domain.payment_session.repository import SessionStore
from domain.payment_session.service import sweep_expired


logger = get_logger(__name__)


class ExpirySweeper:
    def __init__(self, store: SessionStore, interval_seconds: float, clock: Optional[Clock] = None) -> None:
        self.store = store
        self.interval_seconds = interval_seconds
        self.clock = clock or utcnow
        self._task: Optional[asyncio.Task] = None

    async def run_once(self) -> int:
        async with self.store.lock:
            expired = sweep_expired(self.store, self.clock())
        if expired > 0:
            logger.info("expiry_sweep_completed", expired=expired)
        else:
            logger.debug("expiry_sweep_completed", expired=0)
        return expired

    async def run_forever(self) -> None:
        logger.info("expiry_sweeper_started", interval_seconds=self.interval_seconds)
        try:
            while True:
                await asyncio.sleep(self.interval_seconds)
                try:
                    await self.run_once()
                except Exception as exc:
                    # keep sweeping; a single bad run must not stop expiry
                    logger.error("expiry_sweep_failed", error=str(exc), exc_info=True)
        except asyncio.CancelledError:
            logger.info("expiry_sweeper_stopped")
            raise

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run_forever(), name="payment-expiry-sweeper")
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
