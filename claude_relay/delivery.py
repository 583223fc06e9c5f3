"""Rate-limited, ordered delivery of reply chunks."""

import asyncio
import sys
from typing import Awaitable, Callable, Optional, Sequence

from claude_relay.domain.errors import DeliveryFailure
from claude_relay.domain.models import Chunk
from claude_relay.ports.outbound import ChannelPort

CONTINUATION_MARKER = "(continued) "


def _log(msg: str):
    print(msg, file=sys.stderr)


def mention_prefix(author_id: int) -> str:
    return f"<@{author_id}> "


class DeliveryScheduler:
    """Sends chunks in order with a minimum interval between sends.

    The first chunk replies to the triggering message (mention-prefixed when
    ``mention_author``); the rest are plain posts with a continuation marker.
    """

    def __init__(
        self,
        rate_per_second: float = 5.0,
        mention_author: bool = True,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if rate_per_second <= 0:
            raise ValueError("rate_per_second must be positive")
        self.interval = 1.0 / rate_per_second
        self.mention_author = mention_author
        self._sleep = sleep

    def reserved_length(self, author_id: Optional[int]) -> int:
        """Characters the framing adds to the longest framed chunk."""
        first = len(mention_prefix(author_id)) if self._mentions(author_id) else 0
        return max(first, len(CONTINUATION_MARKER))

    def frame(self, chunk: Chunk, author_id: Optional[int]) -> str:
        if chunk.is_first:
            if self._mentions(author_id):
                return mention_prefix(author_id) + chunk.text
            return chunk.text
        return CONTINUATION_MARKER + chunk.text

    async def deliver(
        self,
        channel: ChannelPort,
        chunks: Sequence[Chunk],
        author_id: Optional[int] = None,
    ) -> None:
        """Send every chunk or raise DeliveryFailure at the first failed send."""
        for position, chunk in enumerate(chunks):
            if position:
                await self._sleep(self.interval)
            text = self.frame(chunk, author_id)
            try:
                if chunk.is_first:
                    await channel.reply(text)
                else:
                    await channel.send(text)
            except Exception as e:
                _log(f"[delivery] chunk {chunk.index} failed: {e}")
                raise DeliveryFailure(chunk.index, e) from e
        _log(f"[delivery] sent {len(chunks)} chunk(s)")

    def _mentions(self, author_id: Optional[int]) -> bool:
        return self.mention_author and author_id is not None
