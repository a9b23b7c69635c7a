"""Trailing-debounce publisher for outbound draft writes"""

import asyncio
import inspect
import logging
from typing import Callable, Optional

from ...config import DRAFT_PUBLISH_DEBOUNCE_MS
from .schemas import OrderDraft

logger = logging.getLogger(__name__)


class DebouncedPublisher:
    """
    Coalesces bursts of draft changes into one outbound write.

    Only the write side is debounced: the latest submitted snapshot is
    published once no new submission arrives for `wait_ms`. Without a
    running event loop there is nothing to schedule on, so each
    submission is published immediately.
    """

    def __init__(self, callback: Callable[[OrderDraft], object], wait_ms: int = DRAFT_PUBLISH_DEBOUNCE_MS):
        self.callback = callback
        self.wait_ms = wait_ms
        self.published_count = 0
        self._latest: Optional[OrderDraft] = None
        self._handle: Optional[asyncio.TimerHandle] = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._latest is not None

    def submit(self, draft: OrderDraft) -> None:
        self._latest = draft
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._fire()
            return

        if self.wait_ms <= 0:
            self._fire()
            return
        self._handle = loop.call_later(self.wait_ms / 1000, self._fire)

    def flush(self) -> None:
        """Publish a pending snapshot now"""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._latest is not None:
            self._fire()

    def cancel(self) -> None:
        """Drop a pending snapshot (scheduling step abandoned)"""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._latest = None

    async def wait_idle(self) -> None:
        """Wait for in-flight async callbacks to finish"""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _fire(self) -> None:
        self._handle = None
        draft, self._latest = self._latest, None
        if draft is None:
            return

        self.published_count += 1
        try:
            result = self.callback(draft)
        except Exception as e:
            logger.error(f"❌ Failed to publish draft update: {e}")
            return

        if inspect.isawaitable(result):
            try:
                asyncio.get_running_loop()
            except RuntimeError:
                logger.error("❌ Async draft publisher called without a running event loop")
                if inspect.iscoroutine(result):
                    result.close()
                return
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"❌ Failed to publish draft update: {task.exception()}")
