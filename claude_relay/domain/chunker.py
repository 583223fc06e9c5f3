"""Split long replies into chunks that fit the platform's message limit.

Lines are kept together where possible, then words, and only as a last
resort is a single token cut at exact ``max_length`` boundaries.
"""

from typing import List

from claude_relay.domain.models import Chunk


def _hard_split(token: str, max_length: int) -> List[str]:
    pieces = (token[i:i + max_length] for i in range(0, len(token), max_length))
    # segments are emitted verbatim, but never whitespace-only
    return [p for p in pieces if p.strip()]


def split_message(text: str, max_length: int = 2000) -> List[str]:
    """Split ``text`` into ordered chunks no longer than ``max_length``.

    Empty or whitespace-only input yields an empty list.
    """
    if max_length <= 0:
        raise ValueError("max_length must be positive")

    chunks: List[str] = []
    current = ""

    def flush():
        nonlocal current
        stripped = current.strip()
        if stripped:
            chunks.append(stripped)
        current = ""

    for line in text.split("\n"):
        if len(current) + len(line) + 1 <= max_length:
            current += ("\n" if current else "") + line
            continue

        flush()

        if len(line) <= max_length:
            current = line
            continue

        if " " not in line:
            chunks.extend(_hard_split(line, max_length))
            continue

        # Oversized line with spaces: accumulate word by word
        for word in line.split(" "):
            if len(current) + len(word) + 1 <= max_length:
                current += (" " if current else "") + word
                continue
            flush()
            if len(word) > max_length:
                chunks.extend(_hard_split(word, max_length))
            else:
                current = word

    flush()
    return chunks


def to_chunks(text: str, max_length: int = 2000) -> List[Chunk]:
    """Split ``text`` and tag each piece with its position."""
    return [
        Chunk(text=piece, index=i, is_first=(i == 0))
        for i, piece in enumerate(split_message(text, max_length))
    ]
