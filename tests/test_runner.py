"""Tests for runner.py — timeout race and outcome normalization."""

import asyncio

import pytest

from claude_relay.domain.errors import (
    REASON_EMPTY,
    REASON_GENERIC,
    REASON_NOT_FOUND,
    REASON_RATE_LIMIT,
)
from claude_relay.domain.models import Failure, Success, Timeout
from claude_relay.ports.outbound import InvocationResult
from claude_relay.runner import ExternalTaskRunner


class FakeExecutor:
    def __init__(self, result=None, delay=0.0, error=None):
        self.result = result
        self.delay = delay
        self.error = error
        self.prompts = []
        self.cancelled = False

    async def invoke(self, prompt):
        self.prompts.append(prompt)
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error:
            raise self.error
        return self.result


@pytest.mark.asyncio
async def test_success_is_trimmed():
    executor = FakeExecutor(InvocationResult(True, "exit 0", stdout="  the answer \n"))
    outcome = await ExternalTaskRunner(executor).run("prompt")
    assert outcome == Success("the answer")
    assert executor.prompts == ["prompt"]


@pytest.mark.asyncio
async def test_timeout_stops_the_task():
    executor = FakeExecutor(InvocationResult(True, stdout="late"), delay=10)
    outcome = await ExternalTaskRunner(executor, timeout=0.05).run("prompt")
    assert outcome == Timeout(seconds=0.05)
    await asyncio.sleep(0.01)
    assert executor.cancelled


@pytest.mark.asyncio
async def test_timeout_argument_overrides_default():
    executor = FakeExecutor(InvocationResult(True, stdout="late"), delay=10)
    outcome = await ExternalTaskRunner(executor, timeout=1800).run("prompt", timeout=0.05)
    assert isinstance(outcome, Timeout)


@pytest.mark.asyncio
async def test_nonzero_exit_is_failure():
    result = InvocationResult(False, "Exit code 1", stderr="Error: rate limit reached")
    outcome = await ExternalTaskRunner(FakeExecutor(result)).run("prompt")
    assert outcome == Failure(REASON_RATE_LIMIT, "Error: rate limit reached")


@pytest.mark.asyncio
async def test_failure_without_stderr_uses_exit_reason():
    outcome = await ExternalTaskRunner(FakeExecutor(InvocationResult(False, "Exit code 2"))).run("p")
    assert outcome == Failure(REASON_GENERIC, "Exit code 2")


@pytest.mark.asyncio
async def test_blank_output_is_empty_response():
    executor = FakeExecutor(InvocationResult(True, "exit 0", stdout=" \n\t "))
    outcome = await ExternalTaskRunner(executor).run("prompt")
    assert isinstance(outcome, Failure)
    assert outcome.reason == REASON_EMPTY


@pytest.mark.asyncio
async def test_executor_exception_becomes_failure():
    executor = FakeExecutor(error=FileNotFoundError("claude: command not found"))
    outcome = await ExternalTaskRunner(executor).run("prompt")
    assert isinstance(outcome, Failure)
    assert outcome.reason == REASON_NOT_FOUND


@pytest.mark.asyncio
async def test_caller_cancellation_cancels_invocation():
    executor = FakeExecutor(InvocationResult(True, stdout="x"), delay=10)
    task = asyncio.ensure_future(ExternalTaskRunner(executor).run("prompt"))
    await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    await asyncio.sleep(0.01)
    assert executor.cancelled
