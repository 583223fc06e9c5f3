"""Ports — boundaries between the dispatch pipeline and its collaborators."""

from claude_relay.ports.inbound import InboundMessage
from claude_relay.ports.outbound import (
    ChannelPort,
    HistoryRecord,
    HistoryStrategy,
    InvocationResult,
    TaskExecutorPort,
)

__all__ = [
    "InboundMessage",
    "ChannelPort",
    "HistoryRecord",
    "HistoryStrategy",
    "InvocationResult",
    "TaskExecutorPort",
]
