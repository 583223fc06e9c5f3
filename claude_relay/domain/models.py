"""Domain data models — pure Python dataclasses."""

from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple, Union


@dataclass(frozen=True)
class ConversationEntry:
    """One line of conversation handed to the external task."""

    author: str
    content: str
    timestamp: str  # ISO-8601


class ConversationRecord:
    """Ordered conversation, oldest first, triggering message last."""

    def __init__(self, entries: Sequence[ConversationEntry]):
        if not entries:
            raise ValueError("ConversationRecord needs at least one entry")
        self._entries: Tuple[ConversationEntry, ...] = tuple(entries)

    @property
    def entries(self) -> Tuple[ConversationEntry, ...]:
        return self._entries

    @property
    def latest(self) -> ConversationEntry:
        return self._entries[-1]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ConversationEntry]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"ConversationRecord({len(self._entries)} entries)"


@dataclass(frozen=True)
class Chunk:
    """A size-compliant fragment of a reply."""

    text: str
    index: int
    is_first: bool


# -- Task outcomes --


@dataclass(frozen=True)
class Success:
    text: str


@dataclass(frozen=True)
class Failure:
    reason: str
    detail: str = ""


@dataclass(frozen=True)
class Timeout:
    seconds: float


TaskOutcome = Union[Success, Failure, Timeout]
