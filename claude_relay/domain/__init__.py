"""Domain layer — pure Python, no framework dependencies."""

from claude_relay.domain.models import (
    Chunk,
    ConversationEntry,
    ConversationRecord,
    Failure,
    Success,
    TaskOutcome,
    Timeout,
)
from claude_relay.domain.chunker import split_message, to_chunks
from claude_relay.domain.classifier import has_mention, mention_tokens, should_process
from claude_relay.domain.context import ContextAssembler, build_context
from claude_relay.domain.errors import (
    DeliveryFailure,
    ErrorKind,
    ExternalFailure,
    ExternalTimeout,
    RelayError,
    classify_failure,
    user_message_for,
)
from claude_relay.domain.guard import SingleFlightGuard
from claude_relay.domain.prompt import build_prompt

__all__ = [
    "Chunk",
    "ConversationEntry",
    "ConversationRecord",
    "Failure",
    "Success",
    "TaskOutcome",
    "Timeout",
    "split_message",
    "to_chunks",
    "has_mention",
    "mention_tokens",
    "should_process",
    "ContextAssembler",
    "build_context",
    "DeliveryFailure",
    "ErrorKind",
    "ExternalFailure",
    "ExternalTimeout",
    "RelayError",
    "classify_failure",
    "user_message_for",
    "SingleFlightGuard",
    "build_prompt",
]
