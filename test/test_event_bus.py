"""
Tests for the event bus
"""
import asyncio

import pytest

from core.event_bus import EventBus
from events.events import FieldChanged, SubmitRequested


class TestEventBus:
    def test_sync_handlers_in_order(self):
        bus = EventBus()
        seen = []
        bus.subscribe(FieldChanged, lambda ev: seen.append(("a", ev.value)))
        bus.subscribe(FieldChanged, lambda ev: seen.append(("b", ev.value)))

        bus.emit(FieldChanged(field="name", value="x"))

        assert seen == [("a", "x"), ("b", "x")]

    def test_only_matching_type(self):
        bus = EventBus()
        seen = []
        bus.subscribe(SubmitRequested, seen.append)

        bus.emit(FieldChanged(field="name", value="x"))

        assert seen == []

    @pytest.mark.asyncio
    async def test_coroutine_handler_is_scheduled(self):
        bus = EventBus()
        seen = []

        async def handler(ev):
            seen.append(ev)

        bus.subscribe(SubmitRequested, handler)
        bus.emit(SubmitRequested())
        await asyncio.sleep(0)

        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_failing_coroutine_handler_is_logged(self, caplog):
        bus = EventBus()
        seen = []

        async def broken(ev):
            raise RuntimeError("handler broke")

        bus.subscribe(SubmitRequested, broken)
        bus.subscribe(SubmitRequested, seen.append)
        bus.emit(SubmitRequested())
        for _ in range(3):
            await asyncio.sleep(0)

        assert len(seen) == 1
        assert bus._tasks == set()
        assert "handler broke" in caplog.text
