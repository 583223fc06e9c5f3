"""Claude Relay — Discord mentions answered by a Claude CLI."""

from claude_relay.config import RelayConfig, __version__
from claude_relay.delivery import DeliveryScheduler
from claude_relay.domain import (
    ContextAssembler,
    SingleFlightGuard,
    build_prompt,
    should_process,
    split_message,
)
from claude_relay.pipeline import DispatchPipeline, DispatchResult
from claude_relay.ports import InboundMessage
from claude_relay.runner import ExternalTaskRunner

__all__ = [
    "__version__",
    "RelayConfig",
    "DeliveryScheduler",
    "ContextAssembler",
    "SingleFlightGuard",
    "build_prompt",
    "should_process",
    "split_message",
    "DispatchPipeline",
    "DispatchResult",
    "InboundMessage",
    "ExternalTaskRunner",
]
