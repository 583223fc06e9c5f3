"""Context assembly — channel history into an ordered conversation record.

History retrieval is best effort. Strategies are tried once each in
priority order; when all of them fail or come back empty the record holds
only the triggering message. Degradation is logged, never raised.
"""

import sys
from typing import List, Optional, Sequence

from claude_relay.domain.errors import ErrorKind
from claude_relay.domain.models import ConversationEntry, ConversationRecord
from claude_relay.ports.inbound import InboundMessage
from claude_relay.ports.outbound import HistoryRecord, HistoryStrategy

# Discord returns at most this many messages per history request
MAX_FETCH_LIMIT = 100

UNKNOWN_AUTHOR = "Unknown"


def _log(msg: str):
    print(msg, file=sys.stderr)


def entry_from_message(message: InboundMessage) -> ConversationEntry:
    return ConversationEntry(
        author=message.author_name or UNKNOWN_AUTHOR,
        content=message.content or "",
        timestamp=message.created_at.isoformat(),
    )


def entry_from_record(record: HistoryRecord) -> ConversationEntry:
    return ConversationEntry(
        author=record.author_name or UNKNOWN_AUTHOR,
        content=record.content or "",
        timestamp=record.created_at.isoformat(),
    )


def single_message_record(message: InboundMessage) -> ConversationRecord:
    return ConversationRecord([entry_from_message(message)])


class ContextAssembler:
    """Builds a ConversationRecord bounded by ``max_history`` entries."""

    def __init__(self, max_history: int = 50):
        if max_history <= 0:
            raise ValueError("max_history must be positive")
        self.max_history = max_history

    async def build(
        self,
        message: InboundMessage,
        strategies: Sequence[HistoryStrategy],
    ) -> ConversationRecord:
        # the trigger takes one slot of the window
        limit = min(self.max_history - 1, MAX_FETCH_LIMIT)
        if limit <= 0:
            return single_message_record(message)

        history = await self._fetch(message, strategies, limit)
        if not history:
            _log(
                f"[context] {ErrorKind.CONTEXT_DEGRADED.value}: "
                f"using message {message.message_id} only"
            )
            return single_message_record(message)

        entries = [entry_from_record(r) for r in history]
        entries.append(entry_from_message(message))
        _log(f"[context] assembled {len(entries)} entries for {message.message_id}")
        return ConversationRecord(entries)

    async def _fetch(
        self,
        message: InboundMessage,
        strategies: Sequence[HistoryStrategy],
        limit: int,
    ) -> List[HistoryRecord]:
        for strategy in strategies:
            name = getattr(strategy, "name", type(strategy).__name__)
            try:
                records = await strategy.fetch(message.message_id, limit)
                prepared = self._prepare(records, message.message_id, limit)
            except Exception as e:
                _log(f"[context] history strategy {name} failed: {e}")
                continue
            if prepared:
                return prepared
            _log(f"[context] history strategy {name} returned nothing")
        return []

    @staticmethod
    def _prepare(
        records: Optional[Sequence[HistoryRecord]],
        trigger_id: int,
        limit: int,
    ) -> List[HistoryRecord]:
        """Drop the trigger itself, order oldest first, keep the newest ``limit``."""
        if not records:
            return []
        prior = [r for r in records if r.message_id != trigger_id]
        prior.sort(key=lambda r: (r.created_at, r.message_id))
        return prior[-limit:]


async def build_context(
    message: InboundMessage,
    strategies: Sequence[HistoryStrategy],
    max_history: int = 50,
) -> ConversationRecord:
    """One-shot helper around ContextAssembler."""
    return await ContextAssembler(max_history).build(message, strategies)
