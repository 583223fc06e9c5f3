"""Outbound ports — interfaces for the channel and the external task."""

from dataclasses import dataclass
from datetime import datetime
from typing import AsyncContextManager, List, Protocol, runtime_checkable


@dataclass
class HistoryRecord:
    """One prior channel message as returned by a history fetch."""

    message_id: int
    author_name: str
    author_is_bot: bool
    content: str
    created_at: datetime


@dataclass
class InvocationResult:
    """Raw result of one external task invocation."""

    succeeded: bool
    exit_reason: str = ""
    stdout: str = ""
    stderr: str = ""


@runtime_checkable
class HistoryStrategy(Protocol):
    """One way of retrieving channel history. Tried once per run."""

    name: str

    async def fetch(self, before_id: int, limit: int) -> List[HistoryRecord]: ...


@runtime_checkable
class ChannelPort(Protocol):
    """The channel a triggering message arrived in.

    ``reply`` answers the triggering message, ``send`` posts a plain
    channel message. Both raise on failure.
    """

    async def send(self, text: str) -> None: ...

    async def reply(self, text: str) -> None: ...

    def typing(self) -> AsyncContextManager: ...

    def history_strategies(self) -> List[HistoryStrategy]: ...


@runtime_checkable
class TaskExecutorPort(Protocol):
    """Interface for the external text-generation task.

    Cancelling the task awaiting ``invoke`` is the early-termination
    request: implementations must stop the running process.
    """

    async def invoke(self, prompt: str) -> InvocationResult: ...
