"""Tests for domain/context.py — history retrieval with fallback."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from claude_relay.domain.context import ContextAssembler, build_context
from claude_relay.ports.inbound import InboundMessage
from claude_relay.ports.outbound import HistoryRecord

BASE = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
TRIGGER_ID = 500


def run(coro):
    return asyncio.run(coro)


def _trigger(content="<@1> what now?"):
    return InboundMessage(
        message_id=TRIGGER_ID,
        channel_id=7,
        author_id=2,
        author_name="alice",
        author_is_bot=False,
        content=content,
        created_at=BASE + timedelta(minutes=30),
        mentioned_ids=frozenset({1}),
    )


def _record(message_id, minute, author="bob", content=None):
    return HistoryRecord(
        message_id=message_id,
        author_name=author,
        author_is_bot=False,
        content=content if content is not None else f"msg {message_id}",
        created_at=BASE + timedelta(minutes=minute),
    )


class FakeStrategy:
    def __init__(self, name, records=None, error=None):
        self.name = name
        self.records = records or []
        self.error = error
        self.calls = []

    async def fetch(self, before_id, limit):
        self.calls.append((before_id, limit))
        if self.error:
            raise self.error
        return list(self.records)


class TestContextAssembler:
    def test_failing_fetch_degrades_to_trigger_only(self):
        strategy = FakeStrategy("api", error=RuntimeError("forbidden"))
        record = run(ContextAssembler(50).build(_trigger(), [strategy]))
        assert len(record) == 1
        assert record.latest.author == "alice"
        assert record.latest.content == "<@1> what now?"

    def test_no_strategies(self):
        record = run(ContextAssembler(50).build(_trigger(), []))
        assert len(record) == 1

    def test_falls_through_to_next_strategy(self):
        broken = FakeStrategy("api", error=RuntimeError("boom"))
        empty = FakeStrategy("cache", records=[])
        good = FakeStrategy("other", records=[_record(1, 1)])
        record = run(ContextAssembler(50).build(_trigger(), [broken, empty, good]))
        assert len(record) == 2
        assert len(broken.calls) == len(empty.calls) == len(good.calls) == 1

    def test_first_successful_strategy_wins(self):
        first = FakeStrategy("api", records=[_record(1, 1)])
        second = FakeStrategy("cache", records=[_record(2, 2)])
        run(ContextAssembler(50).build(_trigger(), [first, second]))
        assert second.calls == []

    def test_oldest_first_trigger_last(self):
        records = [_record(3, 3), _record(1, 1), _record(2, 2)]
        record = run(ContextAssembler(50).build(_trigger(), [FakeStrategy("api", records)]))
        assert [e.content for e in record] == ["msg 1", "msg 2", "msg 3", "<@1> what now?"]

    def test_trigger_not_duplicated(self):
        records = [_record(1, 1), _record(TRIGGER_ID, 30, author="alice")]
        record = run(ContextAssembler(50).build(_trigger(), [FakeStrategy("api", records)]))
        assert len(record) == 2

    def test_window_keeps_newest(self):
        records = [_record(i, i) for i in range(1, 11)]
        strategy = FakeStrategy("api", records)
        record = run(ContextAssembler(4).build(_trigger(), [strategy]))
        assert len(record) == 4
        assert [e.content for e in record][:3] == ["msg 8", "msg 9", "msg 10"]
        assert strategy.calls == [(TRIGGER_ID, 3)]

    def test_fetch_limit_capped(self):
        strategy = FakeStrategy("api", [_record(1, 1)])
        run(ContextAssembler(500).build(_trigger(), [strategy]))
        assert strategy.calls == [(TRIGGER_ID, 100)]

    def test_window_of_one_skips_history(self):
        strategy = FakeStrategy("api", [_record(1, 1)])
        record = run(ContextAssembler(1).build(_trigger(), [strategy]))
        assert len(record) == 1
        assert strategy.calls == []

    def test_missing_author_and_content(self):
        records = [_record(1, 1, author="", content="")]
        record = run(ContextAssembler(50).build(_trigger(), [FakeStrategy("api", records)]))
        first = record.entries[0]
        assert first.author == "Unknown"
        assert first.content == ""

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            ContextAssembler(0)


@pytest.mark.asyncio
async def test_build_context_helper():
    record = await build_context(_trigger(), [FakeStrategy("api", [_record(1, 1)])], max_history=10)
    assert len(record) == 2
    assert record.latest.timestamp == (BASE + timedelta(minutes=30)).isoformat()
