"""Tests for the auto-save debouncer."""

from __future__ import annotations

import asyncio

from draftreel.drafts.autosave import Debouncer


def test_burst_coalesces_into_one_pass():
    calls: list[int] = []

    async def scenario():
        async def callback():
            calls.append(1)

        debouncer = Debouncer(0.01, callback)
        for _ in range(5):
            debouncer.schedule()
        assert debouncer.pending
        await debouncer.drain()
        assert not debouncer.pending

    asyncio.run(scenario())
    assert calls == [1]


def test_cancel_drops_pending_pass():
    calls: list[int] = []

    async def scenario():
        async def callback():
            calls.append(1)

        debouncer = Debouncer(0.01, callback)
        debouncer.schedule()
        debouncer.cancel()
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert calls == []

