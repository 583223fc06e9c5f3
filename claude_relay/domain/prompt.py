"""Prompt construction from a conversation record."""

from datetime import datetime

from claude_relay.domain.models import ConversationRecord

LATEST_MARKER = "→"

SINGLE_MESSAGE_TEMPLATE = """You were mentioned on Discord. Reply appropriately to the message below.

User: {author}
Message: {content}
Time: {timestamp}

Write a suitable reply to the message above."""

TRANSCRIPT_TEMPLATE = """Below is the conversation history of a Discord thread ({count} messages). Reply to the latest message (the line marked with an arrow), taking the conversation so far into account.

Conversation history:
{history}

Follow the flow of the conversation and write a suitable reply to the latest message."""


def format_timestamp(iso_string: str) -> str:
    """ISO-8601 to HH:MM; the raw string when it does not parse."""
    try:
        return datetime.fromisoformat(iso_string).strftime("%H:%M")
    except (TypeError, ValueError):
        return iso_string


def build_prompt(record: ConversationRecord) -> str:
    if len(record) == 1:
        entry = record.latest
        return SINGLE_MESSAGE_TEMPLATE.format(
            author=entry.author,
            content=entry.content,
            timestamp=entry.timestamp,
        )

    last = len(record) - 1
    lines = []
    for i, entry in enumerate(record):
        prefix = LATEST_MARKER if i == last else " "
        lines.append(
            f"{prefix} [{format_timestamp(entry.timestamp)}] {entry.author}: {entry.content}"
        )
    return TRANSCRIPT_TEMPLATE.format(count=len(record), history="\n".join(lines))
