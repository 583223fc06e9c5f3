"""Inbound port — platform-agnostic message representation."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet


@dataclass(frozen=True)
class InboundMessage:
    """Discord-agnostic message that may trigger a pipeline run."""

    message_id: int
    channel_id: int
    author_id: int
    author_name: str
    author_is_bot: bool
    content: str
    created_at: datetime
    mentioned_ids: FrozenSet[int] = field(default_factory=frozenset)
