"""Tests for middleware composition and the built-in middleware."""

import asyncio
import logging

import pytest

from gramvibe import (
    DispatchContext,
    HandlerTimeout,
    LoggingMiddleware,
    RateLimitMiddleware,
    RecoveryMiddleware,
    TimeoutMiddleware,
    Update,
    build_chain,
)
from gramvibe.middleware import as_async, sender_id

from .factories import callback_dict, message_dict


def ctx_for(raw):
    return DispatchContext(None, Update.from_dict(raw))


def tracing(log, name):
    def mw(handler):
        async def wrapped(ctx):
            log.append(f"{name}:before")
            await handler(ctx)
            log.append(f"{name}:after")
        return wrapped
    return mw


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class TestBuildChain:
    @pytest.mark.asyncio
    async def test_first_registered_runs_outermost(self):
        log = []

        async def handler(ctx):
            log.append("handler")

        chain = build_chain(handler, [tracing(log, "A"), tracing(log, "B")])
        await chain(ctx_for(message_dict()))
        assert log == ["A:before", "B:before", "handler", "B:after", "A:after"]

    @pytest.mark.asyncio
    async def test_empty_chain_is_the_handler(self):
        async def handler(ctx):
            pass

        assert build_chain(handler, []) is handler

    @pytest.mark.asyncio
    async def test_context_data_flows_inwards(self):
        seen = {}

        def tagging(handler):
            async def wrapped(ctx):
                ctx.set("user", "alice")
                await handler(ctx)
            return wrapped

        async def handler(ctx):
            seen["user"] = ctx.get("user")
            seen["missing"] = ctx.get("missing", "default")

        await build_chain(handler, [tagging])(ctx_for(message_dict()))
        assert seen == {"user": "alice", "missing": "default"}

    @pytest.mark.asyncio
    async def test_sync_handler_runs_in_thread(self):
        calls = []
        handler = as_async(lambda ctx: calls.append(ctx.update.update_id))
        await handler(ctx_for(message_dict(4)))
        assert calls == [4]


class TestLoggingMiddleware:
    @pytest.mark.asyncio
    async def test_logs_success(self, caplog):
        async def handler(ctx):
            pass

        with caplog.at_level(logging.INFO, logger="gramvibe"):
            await LoggingMiddleware()(handler)(ctx_for(message_dict(11)))
        assert "Processing update #11 (message)" in caplog.text
        assert "Update #11 completed in" in caplog.text

    @pytest.mark.asyncio
    async def test_reraises_failure(self, caplog):
        async def handler(ctx):
            raise RuntimeError("boom")

        with caplog.at_level(logging.INFO, logger="gramvibe"):
            with pytest.raises(RuntimeError):
                await LoggingMiddleware()(handler)(ctx_for(message_dict(12)))
        assert "Update #12 failed in" in caplog.text


class TestRecoveryMiddleware:
    @pytest.mark.asyncio
    async def test_swallows_fault(self, caplog):
        async def handler(ctx):
            raise RuntimeError("boom")

        await RecoveryMiddleware()(handler)(ctx_for(message_dict(3)))
        assert "Recovered from fault in update #3" in caplog.text

    @pytest.mark.asyncio
    async def test_outer_middleware_sees_success(self):
        log = []

        async def handler(ctx):
            raise RuntimeError("boom")

        chain = build_chain(handler, [tracing(log, "outer"), RecoveryMiddleware()])
        await chain(ctx_for(message_dict()))
        assert log == ["outer:before", "outer:after"]


class TestTimeoutMiddleware:
    @pytest.mark.asyncio
    async def test_fast_handler(self):
        done = []

        async def handler(ctx):
            done.append(ctx.time_remaining() is not None)

        await TimeoutMiddleware(1)(handler)(ctx_for(message_dict()))
        assert done == [True]

    @pytest.mark.asyncio
    async def test_deadline_passes(self):
        release = asyncio.Event()
        finished = []

        async def handler(ctx):
            await release.wait()
            finished.append(ctx.expired)

        ctx = ctx_for(message_dict())
        with pytest.raises(HandlerTimeout):
            await TimeoutMiddleware(0.05)(handler)(ctx)

        # the inner chain was not cancelled; it finishes on its own
        release.set()
        for _ in range(50):
            if finished:
                break
            await asyncio.sleep(0.01)
        assert finished == [True]

    @pytest.mark.asyncio
    async def test_keeps_earlier_deadline(self):
        seen = []

        async def handler(ctx):
            seen.append(ctx.time_remaining())

        chain = build_chain(handler, [TimeoutMiddleware(0.5), TimeoutMiddleware(10)])
        await chain(ctx_for(message_dict()))
        assert seen[0] <= 0.5

    def test_rejects_non_positive(self):
        with pytest.raises(ValueError):
            TimeoutMiddleware(0)


class TestRateLimitMiddleware:
    def test_fixed_window(self):
        clock = FakeClock()
        limiter = RateLimitMiddleware(max_requests=2, window=60, clock=clock)
        assert limiter.allow(42)
        assert limiter.allow(42)
        assert not limiter.allow(42)
        assert limiter.allow(7)

        clock.now += 60
        assert limiter.allow(42)

    @pytest.mark.asyncio
    async def test_suppressed_update_is_a_noop(self, caplog):
        calls = []

        async def handler(ctx):
            calls.append(ctx.update.update_id)

        chain = RateLimitMiddleware(max_requests=1, window=60, clock=FakeClock())(handler)
        await chain(ctx_for(message_dict(1)))
        await chain(ctx_for(message_dict(2)))
        await chain(ctx_for(callback_dict(3)))
        assert calls == [1]
        assert "Rate limit exceeded for user 42" in caplog.text

    @pytest.mark.asyncio
    async def test_updates_without_sender_bypass(self):
        calls = []

        async def handler(ctx):
            calls.append(ctx.update.update_id)

        chain = RateLimitMiddleware(max_requests=1, window=60, clock=FakeClock())(handler)
        for i in range(3):
            await chain(ctx_for(message_dict(i, user_id=None)))
        await chain(ctx_for({"update_id": 9, "poll": {"id": "p"}}))
        assert calls == [0, 1, 2, 9]

    def test_sender_id(self):
        assert sender_id(Update.from_dict(message_dict(user_id=5))) == 5
        assert sender_id(Update.from_dict(callback_dict(user_id=6))) == 6
        assert sender_id(Update.from_dict(message_dict(user_id=None))) is None
