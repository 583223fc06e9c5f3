"""Discord adapter — the chat platform side of the relay."""

from claude_relay.adapters.discord.bot import RelayBot
from claude_relay.adapters.discord.channel import (
    ApiHistoryStrategy,
    CachedHistoryStrategy,
    DiscordChannel,
    to_inbound,
    to_record,
)

__all__ = [
    "RelayBot",
    "ApiHistoryStrategy",
    "CachedHistoryStrategy",
    "DiscordChannel",
    "to_inbound",
    "to_record",
]
