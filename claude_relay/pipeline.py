"""DispatchPipeline — classify, guard, assemble, invoke, chunk, deliver.

One ``handle`` call is one pipeline run. Runs for different messages may
overlap; the only state they share is the single-flight guard.
"""

import sys
from collections import Counter
from enum import Enum
from typing import Dict, Optional

from claude_relay.config import RelayConfig
from claude_relay.delivery import DeliveryScheduler
from claude_relay.domain.chunker import to_chunks
from claude_relay.domain.classifier import should_process
from claude_relay.domain.context import ContextAssembler
from claude_relay.domain.errors import (
    REASON_EMPTY,
    DeliveryFailure,
    ErrorKind,
    ExternalFailure,
    ExternalTimeout,
    RelayError,
    user_message_for,
)
from claude_relay.domain.guard import SingleFlightGuard
from claude_relay.domain.models import Failure, Timeout
from claude_relay.domain.prompt import build_prompt
from claude_relay.ports.inbound import InboundMessage
from claude_relay.ports.outbound import ChannelPort
from claude_relay.runner import ExternalTaskRunner


def _log(msg: str):
    print(msg, file=sys.stderr)


class PipelineState(str, Enum):
    IDLE = "idle"
    CLASSIFYING = "classifying"
    GUARDING = "guarding"
    ASSEMBLING_CONTEXT = "assembling-context"
    INVOKING = "invoking"
    CHUNKING = "chunking"
    DELIVERING = "delivering"
    DONE = "done"
    ERROR_HANDLING = "error-handling"


class DispatchResult(str, Enum):
    SKIPPED = "skipped"
    DUPLICATE = "duplicate"
    DELIVERED = "delivered"
    FAILED = "failed"


class DispatchPipeline:
    """Relays one qualifying message to the external task and back."""

    def __init__(
        self,
        config: RelayConfig,
        runner: ExternalTaskRunner,
        guard: Optional[SingleFlightGuard] = None,
        assembler: Optional[ContextAssembler] = None,
        scheduler: Optional[DeliveryScheduler] = None,
        stats: Optional[Counter] = None,
    ):
        self.config = config
        self.runner = runner
        self.guard = guard or SingleFlightGuard()
        self.assembler = assembler or ContextAssembler(config.max_history_messages)
        self.scheduler = scheduler or DeliveryScheduler(
            rate_per_second=config.outbound_rate_per_second,
            mention_author=config.mention_author,
        )
        # may be shared with the pipeline this one replaces
        self.stats: Counter = stats if stats is not None else Counter()

    @property
    def in_flight(self) -> int:
        return len(self.guard)

    def snapshot(self) -> Dict[str, int]:
        return {r.value: self.stats[r.value] for r in DispatchResult}

    async def handle(
        self,
        message: InboundMessage,
        channel: ChannelPort,
        self_id: int,
    ) -> DispatchResult:
        result = await self._handle(message, channel, self_id)
        self.stats[result.value] += 1
        return result

    async def _handle(
        self,
        message: InboundMessage,
        channel: ChannelPort,
        self_id: int,
    ) -> DispatchResult:
        tag = f"[relay:{message.message_id}]"

        # CLASSIFYING and GUARDING fall back to IDLE with no user-visible action
        if not should_process(
            message,
            self_id,
            test_mode=self.config.test_mode,
            designated_caller_id=self.config.designated_test_caller_id,
        ):
            return DispatchResult.SKIPPED

        if not self.guard.try_acquire(message.message_id):
            _log(
                f"{tag} {ErrorKind.CONCURRENT_DUPLICATE.value}: already in flight, "
                f"back to {PipelineState.IDLE.value}"
            )
            return DispatchResult.DUPLICATE

        state = PipelineState.ASSEMBLING_CONTEXT
        try:
            _log(f"{tag} processing mention from {message.author_name}")
            record = await self.assembler.build(message, channel.history_strategies())
            prompt = build_prompt(record)

            state = PipelineState.INVOKING
            async with channel.typing():
                outcome = await self.runner.run(prompt, self.config.task_timeout_seconds)
            if isinstance(outcome, Timeout):
                raise ExternalTimeout(outcome.seconds)
            if isinstance(outcome, Failure):
                raise ExternalFailure(outcome.reason, outcome.detail)

            state = PipelineState.CHUNKING
            budget = self.config.max_message_length - self.scheduler.reserved_length(
                message.author_id
            )
            chunks = to_chunks(outcome.text, budget)
            if not chunks:
                raise ExternalFailure(REASON_EMPTY)

            state = PipelineState.DELIVERING
            await self.scheduler.deliver(channel, chunks, message.author_id)
            _log(f"{tag} {PipelineState.DONE.value}: {len(chunks)} chunk(s) delivered")
            return DispatchResult.DELIVERED
        except Exception as e:
            _log(f"{tag} {state.value} -> {PipelineState.ERROR_HANDLING.value}: {e}")
            if isinstance(e, ExternalFailure) and e.detail:
                _log(f"{tag} task diagnostics: {e.detail[:500]}")
            await self._notify(channel, e, tag)
            return DispatchResult.FAILED
        finally:
            self.guard.release(message.message_id)

    async def _notify(self, channel: ChannelPort, error: Exception, tag: str):
        """Single best-effort user notification; its own failure is terminal."""
        kind = error.kind.value if isinstance(error, RelayError) else "unexpected"
        # the failed first chunk was the reply, so the notice is posted instead
        notice = (
            channel.send
            if isinstance(error, DeliveryFailure) and error.index == 0
            else channel.reply
        )
        try:
            await notice(user_message_for(error))
        except Exception as e:
            _log(f"{tag} {ErrorKind.DELIVERY_FAILURE.value} while reporting {kind}: {e}")
