"""Tests for the leading + trailing notification throttle."""

from __future__ import annotations

import asyncio

from slicetable.utils.throttle import Throttle


def test_runs_immediately_without_event_loop():
    calls = []
    throttle = Throttle(lambda: calls.append(1), 100)
    throttle()
    throttle()
    assert calls == [1, 1]


def test_collapses_calls_during_cooldown():
    calls = []
    throttle = Throttle(lambda: calls.append(1), 20)

    async def scenario():
        throttle()
        throttle()
        throttle()
        assert calls == [1]
        assert throttle.pending
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert calls == [1, 1]


def test_flush_runs_trailing_call_now():
    calls = []
    throttle = Throttle(lambda: calls.append(1), 1000)

    async def scenario():
        throttle()
        throttle()
        throttle.flush()
        assert calls == [1, 1]
        throttle.cancel()

    asyncio.run(scenario())


def test_cancel_drops_trailing_call():
    calls = []
    throttle = Throttle(lambda: calls.append(1), 20)

    async def scenario():
        throttle()
        throttle()
        throttle.cancel()
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert calls == [1]
