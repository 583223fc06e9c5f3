"""Discord implementations of ChannelPort and the history strategies."""

import sys
from contextlib import AsyncExitStack, asynccontextmanager
from typing import List, Optional

import discord

from claude_relay.ports.inbound import InboundMessage
from claude_relay.ports.outbound import HistoryRecord, HistoryStrategy


def _log(msg: str):
    print(msg, file=sys.stderr)


def author_name(author) -> str:
    return getattr(author, "display_name", None) or getattr(author, "name", None) or "Unknown"


def to_inbound(message: discord.Message) -> InboundMessage:
    """Convert a Discord message to a platform-agnostic InboundMessage."""
    mentioned = {user.id for user in message.mentions}
    mentioned.update(getattr(message, "raw_mentions", None) or [])
    return InboundMessage(
        message_id=message.id,
        channel_id=message.channel.id,
        author_id=message.author.id,
        author_name=author_name(message.author),
        author_is_bot=bool(message.author.bot),
        content=message.content or "",
        created_at=message.created_at,
        mentioned_ids=frozenset(mentioned),
    )


def to_record(message: discord.Message) -> HistoryRecord:
    return HistoryRecord(
        message_id=message.id,
        author_name=author_name(message.author),
        author_is_bot=bool(message.author.bot),
        content=message.content or "",
        created_at=message.created_at,
    )


class ApiHistoryStrategy:
    """History via the channel history endpoint (newest first on the wire)."""

    name = "api"

    def __init__(self, channel: discord.abc.Messageable):
        self._channel = channel

    async def fetch(self, before_id: int, limit: int) -> List[HistoryRecord]:
        records = []
        async for m in self._channel.history(limit=limit, before=discord.Object(id=before_id)):
            records.append(to_record(m))
        records.reverse()
        return records


class CachedHistoryStrategy:
    """History from the client's in-memory message cache."""

    name = "cache"

    def __init__(self, client: discord.Client, channel_id: int):
        self._client = client
        self._channel_id = channel_id

    async def fetch(self, before_id: int, limit: int) -> List[HistoryRecord]:
        cached = [
            m for m in self._client.cached_messages
            if m.channel.id == self._channel_id and m.id < before_id
        ]
        return [to_record(m) for m in cached[-limit:]]


class DiscordChannel:
    """ChannelPort bound to one triggering Discord message."""

    def __init__(self, message: discord.Message, client: Optional[discord.Client] = None):
        self._message = message
        self._client = client

    async def reply(self, text: str) -> None:
        # the mention, when wanted, is already part of the text
        await self._message.reply(text, mention_author=False)

    async def send(self, text: str) -> None:
        await self._message.channel.send(text)

    @asynccontextmanager
    async def typing(self):
        """Typing indicator; a failure to show it never fails the run."""
        async with AsyncExitStack() as stack:
            try:
                await stack.enter_async_context(self._message.channel.typing())
            except Exception as e:
                _log(f"[discord] typing indicator unavailable: {e}")
            yield

    def history_strategies(self) -> List[HistoryStrategy]:
        strategies: List[HistoryStrategy] = [ApiHistoryStrategy(self._message.channel)]
        if self._client is not None:
            strategies.append(CachedHistoryStrategy(self._client, self._message.channel.id))
        return strategies
