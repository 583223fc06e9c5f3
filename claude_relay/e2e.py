"""End-to-end checks against a live Discord channel.

A second "caller" bot mentions the relay bot in a test channel and waits
for its reply. The relay must run in test mode with the caller as its
designated test caller, otherwise the caller's messages are ignored.
"""

import asyncio
import re
import sys
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Pattern, Sequence

import discord


def _log(msg: str):
    print(msg, file=sys.stderr)


@dataclass
class E2EScenario:
    name: str
    message: str
    timeout_seconds: float
    expected_pattern: Optional[Pattern] = None


@dataclass
class E2EResult:
    scenario: str
    success: bool
    response_time_ms: int
    error: Optional[str] = None
    response: Optional[str] = None


DEFAULT_SCENARIOS = [
    E2EScenario(name="basic reply", message="Hello", timeout_seconds=30.0),
    E2EScenario(
        name="external task round trip",
        message="What is 2+2?",
        timeout_seconds=60.0,
        expected_pattern=re.compile(r"4"),
    ),
    E2EScenario(name="short message", message="Goodbye", timeout_seconds=60.0),
]


def evaluate_response(scenario: E2EScenario, response: str) -> bool:
    if scenario.expected_pattern is not None:
        return bool(scenario.expected_pattern.search(response))
    return len(response) > 0


def format_report(results: Sequence[E2EResult]) -> List[str]:
    total = len(results)
    passed = sum(1 for r in results if r.success)
    rate = (passed / total * 100) if total else 0.0
    lines = [
        "=" * 50,
        "E2E test report",
        "=" * 50,
        f"Total: {total}",
        f"Passed: {passed}",
        f"Failed: {total - passed}",
        f"Success rate: {rate:.1f}%",
        "-" * 50,
    ]
    for r in results:
        status = "PASS" if r.success else "FAIL"
        lines.append(f"{status} {r.scenario} ({r.response_time_ms}ms)")
        if r.error:
            lines.append(f"  error: {r.error}")
        if r.response:
            lines.append(f"  response: {r.response}")
    lines.append("=" * 50)
    return lines


class E2ERunner:
    """Drives scenarios through a caller bot and records the relay's replies."""

    def __init__(
        self,
        main_client: discord.Client,
        caller_token: str,
        channel_id: int,
        on_caller_ready: Optional[Callable[[int], None]] = None,
        pause_seconds: float = 2.0,
    ):
        self._main = main_client
        self._caller_token = caller_token
        self._channel_id = channel_id
        self._on_caller_ready = on_caller_ready
        self._pause = pause_seconds
        self.results: List[E2EResult] = []

    async def run(self, scenarios: Sequence[E2EScenario] = DEFAULT_SCENARIOS) -> List[E2EResult]:
        _log("[e2e] starting scenarios")
        intents = discord.Intents.default()
        intents.message_content = True
        caller = discord.Client(intents=intents)
        caller_task = asyncio.create_task(caller.start(self._caller_token))
        try:
            await self._main.wait_until_ready()
            await caller.wait_until_ready()
            _log(f"[e2e] caller connected as {caller.user}")
            if self._on_caller_ready and caller.user:
                self._on_caller_ready(caller.user.id)

            channel = caller.get_channel(self._channel_id) or await caller.fetch_channel(self._channel_id)
            self.results = []
            for scenario in scenarios:
                _log(f"[e2e] running: {scenario.name}")
                self.results.append(await self._run_one(channel, scenario))
                await asyncio.sleep(self._pause)
        finally:
            await caller.close()
            caller_task.cancel()
            _log("[e2e] caller disconnected")

        for line in format_report(self.results):
            _log(line)
        return self.results

    async def _run_one(self, channel, scenario: E2EScenario) -> E2EResult:
        main_id = self._main.user.id
        start = time.monotonic()

        def is_reply(m: discord.Message) -> bool:
            return m.author.id == main_id and m.channel.id == self._channel_id

        # register the waiter before sending so a fast reply is not missed
        waiter = asyncio.ensure_future(
            self._main.wait_for("message", check=is_reply, timeout=scenario.timeout_seconds)
        )
        try:
            await channel.send(f"<@{main_id}> {scenario.message}")
            reply = await waiter
        except asyncio.TimeoutError:
            return E2EResult(
                scenario=scenario.name,
                success=False,
                response_time_ms=int((time.monotonic() - start) * 1000),
                error="timed out waiting for a reply",
            )
        except Exception as e:
            waiter.cancel()
            return E2EResult(
                scenario=scenario.name,
                success=False,
                response_time_ms=int((time.monotonic() - start) * 1000),
                error=str(e),
            )

        content = reply.content or ""
        return E2EResult(
            scenario=scenario.name,
            success=evaluate_response(scenario, content),
            response_time_ms=int((time.monotonic() - start) * 1000),
            response=content[:100],
        )

    def all_passed(self) -> bool:
        return bool(self.results) and all(r.success for r in self.results)
