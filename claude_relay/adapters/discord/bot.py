"""Discord client that feeds inbound messages to the dispatch pipeline."""

import sys

import discord

from claude_relay.adapters.discord.channel import DiscordChannel, to_inbound
from claude_relay.pipeline import DispatchPipeline


def _log(msg: str):
    print(msg, file=sys.stderr)


class RelayBot(discord.Client):
    """Thin Discord adapter that delegates every message to DispatchPipeline.

    discord.py runs each ``on_message`` in its own task, so runs for
    different messages proceed concurrently.
    """

    def __init__(self, pipeline: DispatchPipeline, **discord_kwargs):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents, **discord_kwargs)
        self._pipeline = pipeline

    @property
    def pipeline(self) -> DispatchPipeline:
        return self._pipeline

    def use_pipeline(self, pipeline: DispatchPipeline):
        """Swap in a pipeline built from a new config (e.g. test mode)."""
        self._pipeline = pipeline
        _log(f"[relay] pipeline replaced (test_mode={pipeline.config.test_mode})")

    async def on_ready(self):
        _log(f"[relay] logged in as {self.user} (id {self.user.id if self.user else '?'})")

    async def on_message(self, message: discord.Message):
        # Guard: self.user can be None before on_ready fires
        if not self.user:
            return
        await self._pipeline.handle(
            to_inbound(message),
            DiscordChannel(message, client=self),
            self.user.id,
        )
