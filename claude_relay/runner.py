"""Run the external task once, raced against a timeout."""

import asyncio
import sys
from datetime import datetime
from typing import Optional

from claude_relay.domain.errors import REASON_EMPTY, classify_failure
from claude_relay.domain.models import Failure, Success, TaskOutcome, Timeout
from claude_relay.ports.outbound import TaskExecutorPort


def _log(msg: str):
    print(msg, file=sys.stderr)


def _discard_result(task: asyncio.Task):
    # retrieve the loser's exception so asyncio does not report it as unhandled
    if not task.cancelled():
        task.exception()


class ExternalTaskRunner:
    """Invokes the executor and normalizes its result into a TaskOutcome."""

    def __init__(self, executor: TaskExecutorPort, timeout: float = 1800.0):
        self.executor = executor
        self.timeout = timeout

    async def run(self, prompt: str, timeout: Optional[float] = None) -> TaskOutcome:
        limit = self.timeout if timeout is None else timeout
        _log(f"[{datetime.now().isoformat()}] [runner] invoking external task (timeout {limit:g}s)")

        task = asyncio.ensure_future(self.executor.invoke(prompt))
        try:
            done, _ = await asyncio.wait({task}, timeout=limit)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task not in done:
            # stop signal only; the process shutdown is not awaited
            task.cancel()
            task.add_done_callback(_discard_result)
            _log(f"[{datetime.now().isoformat()}] [runner] timed out after {limit:g}s")
            return Timeout(seconds=limit)

        try:
            result = task.result()
        except Exception as e:
            detail = str(e) or type(e).__name__
            _log(f"[runner] executor raised: {detail}")
            return Failure(reason=classify_failure(detail), detail=detail)

        if not result.succeeded:
            diagnostic = result.stderr or result.exit_reason
            reason = classify_failure(diagnostic)
            _log(f"[runner] task failed ({reason}): {result.exit_reason}")
            return Failure(reason=reason, detail=diagnostic)

        text = (result.stdout or "").strip()
        if not text:
            _log("[runner] task succeeded with empty output")
            return Failure(reason=REASON_EMPTY, detail="")

        _log(f"[{datetime.now().isoformat()}] [runner] completed ({len(text)} chars)")
        return Success(text=text)
