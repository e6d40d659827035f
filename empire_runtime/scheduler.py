"""
Tick Scheduler — periodic driver for a GameSession.

Runs on the asyncio event loop and holds a cancellable task handle.
After ``cancel()`` no further tick reaches the session. A tick that
raises is logged and ends the loop; ``running`` then reads False.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from empire_kernel.constants import TICK_INTERVAL_MS
from empire_kernel.domain_types import TransitionResult

from .session import GameSession

logger = logging.getLogger(__name__)


class TickScheduler:
    """Calls ``session.advance_tick()`` every *interval_seconds*."""

    def __init__(
        self,
        session: GameSession,
        interval_seconds: float = TICK_INTERVAL_MS / 1000,
        on_tick: Optional[Callable[[TransitionResult], None]] = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(
                f"interval_seconds must be positive, got {interval_seconds}"
            )
        self._session = session
        self._interval = interval_seconds
        self._on_tick = on_tick
        self._task: Optional[asyncio.Task] = None
        self._last_error: Optional[BaseException] = None

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def last_error(self) -> Optional[BaseException]:
        """Exception that stopped the loop, if any."""
        return self._last_error

    def start(self) -> asyncio.Task:
        """Schedule the tick loop on the running event loop."""
        if self.running:
            raise RuntimeError(
                f"Scheduler for session {self._session.session_id!r} "
                f"is already running"
            )
        self._last_error = None
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("tick scheduler started: session=%s interval=%.3fs",
                    self._session.session_id, self._interval)
        return self._task

    def cancel(self) -> None:
        """Stop ticking. Safe to call more than once."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.info("tick scheduler cancelled: session=%s",
                        self._session.session_id)
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                result = self._session.advance_tick()
            except Exception as exc:
                # A failing tick stops the loop; the session keeps its last good state.
                self._last_error = exc
                logger.exception("tick scheduler stopped: session=%s",
                                 self._session.session_id)
                return
            if self._on_tick is not None:
                self._on_tick(result)
