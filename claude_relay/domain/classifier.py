"""Decide whether an inbound message should trigger the relay."""

import sys
from typing import Optional

from claude_relay.ports.inbound import InboundMessage


def _log(msg: str):
    print(msg, file=sys.stderr)


def mention_tokens(user_id: int):
    """Raw-text mention forms Discord uses for a user (plain and nickname)."""
    return (f"<@{user_id}>", f"<@!{user_id}>")


def has_mention(message: InboundMessage, self_id: int) -> bool:
    """Structured mention, or the raw token when the platform parse missed it."""
    if self_id in message.mentioned_ids:
        return True
    return any(token in message.content for token in mention_tokens(self_id))


def should_process(
    message: InboundMessage,
    self_id: int,
    test_mode: bool = False,
    designated_caller_id: Optional[int] = None,
) -> bool:
    """Return True when ``message`` should be relayed.

    Rules, first match wins:
    - own messages are never processed (no self-loops, whatever they mention)
    - automated authors are rejected, except the designated caller in test mode
    - everyone else must mention us
    """
    if message.author_id == self_id:
        _log(f"[classifier] skip {message.message_id}: own message")
        return False

    mentioned = has_mention(message, self_id)

    if message.author_is_bot:
        accepted = (
            test_mode
            and designated_caller_id is not None
            and message.author_id == designated_caller_id
        )
        if not accepted:
            _log(
                f"[classifier] skip {message.message_id}: automated author "
                f"{message.author_id} (test_mode={test_mode})"
            )
        return accepted

    if not mentioned:
        return False
    _log(f"[classifier] accept {message.message_id} from {message.author_name}")
    return True
