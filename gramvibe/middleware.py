"""
Middleware: callables turning one handler into another.

build_chain(h, [m1, m2]) == m1(m2(h)): middleware registered first runs
outermost, so it sees the context first and the outcome last.
"""

from __future__ import annotations

import asyncio
import inspect
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Set

from .context import DispatchContext, Handler, Middleware
from .errors import HandlerTimeout
from .log import get_logger
from .types.update import Update

logger = get_logger("middleware")


def as_async(fn: Callable) -> Handler:
    """Coroutine functions are used as is; plain functions run in a worker thread."""
    if inspect.iscoroutinefunction(fn):
        return fn

    async def run_in_thread(ctx: DispatchContext) -> None:
        result = await asyncio.to_thread(fn, ctx)
        if inspect.isawaitable(result):
            await result

    run_in_thread.__name__ = getattr(fn, "__name__", "handler")
    return run_in_thread


def build_chain(handler: Handler, middleware: Sequence[Middleware]) -> Handler:
    final = handler
    for mw in reversed(middleware):
        final = mw(final)
    return final


class LoggingMiddleware:
    """Logs start, elapsed time and outcome of every update; never alters the outcome."""

    def __call__(self, handler: Handler) -> Handler:
        async def logged(ctx: DispatchContext) -> None:
            update_id = ctx.update.update_id
            start = time.perf_counter()
            logger.info("Processing update #%s (%s)", update_id, ctx.update.kind.value)
            try:
                await handler(ctx)
            except Exception as e:
                elapsed_ms = (time.perf_counter() - start) * 1000
                logger.info("Update #%s failed in %.2fms: %s", update_id, elapsed_ms, e)
                raise
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info("Update #%s completed in %.2fms", update_id, elapsed_ms)
        return logged


class RecoveryMiddleware:
    """
    Contains faults raised by the wrapped chain.

    Any exception is logged and turned into a successful no-op, so nothing
    outside this middleware learns that the chain failed. Install it only
    where swallowing failures is wanted.
    """

    def __call__(self, handler: Handler) -> Handler:
        async def recovered(ctx: DispatchContext) -> None:
            try:
                await handler(ctx)
            except Exception:
                logger.exception("Recovered from fault in update #%s", ctx.update.update_id)
        return recovered


class TimeoutMiddleware:
    """
    Runs the wrapped chain under a deadline.

    When the deadline passes first, HandlerTimeout is raised right away.
    The wrapped chain is not cancelled: it keeps running in the background
    and whatever it eventually produces is discarded. Handlers that want to
    stop early can check ctx.expired / ctx.time_remaining().
    """

    def __init__(self, seconds: float):
        if seconds <= 0:
            raise ValueError("timeout must be positive")
        self.seconds = seconds
        self._abandoned: Set[asyncio.Future] = set()

    def _abandon(self, task: asyncio.Future) -> None:
        self._abandoned.add(task)
        task.add_done_callback(self._reap)

    def _reap(self, task: asyncio.Future) -> None:
        self._abandoned.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Abandoned handler finished with %r", task.exception())

    def __call__(self, handler: Handler) -> Handler:
        async def limited(ctx: DispatchContext) -> None:
            ctx.narrow_deadline(self.seconds)
            task = asyncio.ensure_future(handler(ctx))
            done, _ = await asyncio.wait({task}, timeout=self.seconds)
            if task in done:
                return task.result()
            self._abandon(task)
            logger.warning("Handler timeout after %ss for update #%s", self.seconds, ctx.update.update_id)
            raise HandlerTimeout(f"handler did not finish within {self.seconds}s")
        return limited


@dataclass
class _Limit:
    count: int
    reset_at: float


def sender_id(update: Update) -> Optional[int]:
    """Identity used for rate limiting: message sender or callback query sender."""
    if update.message is not None and update.message.from_user is not None:
        return update.message.from_user.id
    if update.callback_query is not None and update.callback_query.from_user is not None:
        return update.callback_query.from_user.id
    return None


class RateLimitMiddleware:
    """
    Fixed-window counter per sender.

    The first call of a window resets the count to 1; calls are allowed while
    the count is below max_requests; the rest are dropped as successful no-ops
    until the window elapses. Updates without a sender are never limited.
    """

    def __init__(self, max_requests: int, window: float, clock: Callable[[], float] = time.monotonic):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.window = window
        self._clock = clock
        self._limits: Dict[int, _Limit] = {}
        self._lock = threading.Lock()

    def allow(self, user_id: int) -> bool:
        now = self._clock()
        with self._lock:
            limit = self._limits.get(user_id)
            if limit is None or now >= limit.reset_at:
                self._limits[user_id] = _Limit(count=1, reset_at=now + self.window)
                return True
            if limit.count < self.max_requests:
                limit.count += 1
                return True
            return False

    def __call__(self, handler: Handler) -> Handler:
        async def limited(ctx: DispatchContext) -> None:
            user_id = sender_id(ctx.update)
            if not user_id:
                return await handler(ctx)
            if not self.allow(user_id):
                logger.warning("Rate limit exceeded for user %s", user_id)
                return None
            return await handler(ctx)
        return limited
