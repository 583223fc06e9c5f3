"""LLM CLI executors — implement TaskExecutorPort."""

import asyncio
import os
import sys
import tempfile
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from claude_relay.ports.outbound import InvocationResult, TaskExecutorPort


def _log(msg: str):
    print(msg, file=sys.stderr)


async def run_cancellable(args: Sequence[str]) -> Tuple[asyncio.subprocess.Process, bytes, bytes]:
    """Run a subprocess and return process/stdout/stderr.

    Cancelling the awaiting task kills the process. The kill is not awaited.
    """
    proc = await asyncio.create_subprocess_exec(
        *args,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await proc.communicate()
    except asyncio.CancelledError:
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            _log(f"[executor] killed {args[0]} (pid {proc.pid})")
        raise
    return proc, stdout, stderr


def _spawn_failure(command: str, error: OSError) -> InvocationResult:
    if isinstance(error, FileNotFoundError):
        reason = f"{command}: command not found"
    elif isinstance(error, PermissionError):
        reason = f"{command}: permission denied"
    else:
        reason = f"{command}: {error}"
    return InvocationResult(succeeded=False, exit_reason=reason, stderr=reason)


class ClaudeCliExecutor:
    """Executes ``claude -p <prompt>``."""

    command = "claude"

    def __init__(self, model: Optional[str] = None):
        self.model = model or None

    def build_args(self, prompt: str) -> List[str]:
        args = [self.command, "-p", prompt]
        if self.model:
            args.extend(["--model", self.model])
        return args

    async def invoke(self, prompt: str) -> InvocationResult:
        _log(f"[{datetime.now().isoformat()}] Executing with Claude CLI")
        try:
            proc, stdout, stderr = await run_cancellable(self.build_args(prompt))
        except OSError as e:
            return _spawn_failure(self.command, e)

        out = stdout.decode("utf-8", errors="replace")
        err = stderr.decode("utf-8", errors="replace")
        if proc.returncode == 0:
            _log(f"[{datetime.now().isoformat()}] Completed")
            return InvocationResult(succeeded=True, exit_reason="exit 0", stdout=out, stderr=err)
        return InvocationResult(
            succeeded=False,
            exit_reason=f"Exit code {proc.returncode}",
            stdout=out,
            stderr=err,
        )


class CodexCliExecutor:
    """Executes ``codex exec`` and reads its last message from a temp file."""

    command = "codex"

    def __init__(self, model: Optional[str] = None):
        self.model = model or None

    def build_args(self, prompt: str, output_path: str) -> List[str]:
        args = [
            self.command, "exec",
            "--color", "never",
            "--output-last-message", output_path,
        ]
        if self.model:
            args.extend(["--model", self.model])
        args.append(prompt)
        return args

    async def invoke(self, prompt: str) -> InvocationResult:
        fd, output_path = tempfile.mkstemp(prefix="codex-last-", suffix=".txt")
        os.close(fd)
        out_file = Path(output_path)
        _log(f"[{datetime.now().isoformat()}] Executing with Codex CLI")

        try:
            try:
                proc, stdout, stderr = await run_cancellable(self.build_args(prompt, output_path))
            except OSError as e:
                return _spawn_failure(self.command, e)

            out = stdout.decode("utf-8", errors="replace")
            err = stderr.decode("utf-8", errors="replace")
            if proc.returncode != 0:
                return InvocationResult(
                    succeeded=False,
                    exit_reason=f"Exit code {proc.returncode}",
                    stdout=out,
                    stderr=err or out,
                )

            response = ""
            if out_file.exists():
                response = out_file.read_text(encoding="utf-8")
            if not response.strip():
                response = out
            _log(f"[{datetime.now().isoformat()}] Completed")
            return InvocationResult(succeeded=True, exit_reason="exit 0", stdout=response, stderr=err)
        finally:
            try:
                out_file.unlink(missing_ok=True)
            except OSError as e:
                _log(f"[executor] could not remove {output_path}: {e}")


def create_executor(provider: str = "claude", model: Optional[str] = None) -> TaskExecutorPort:
    """Create an executor for the selected provider."""
    selected = (provider or "claude").strip().lower()
    if selected == "claude":
        return ClaudeCliExecutor(model=model)
    if selected == "codex":
        return CodexCliExecutor(model=model)
    raise ValueError(f"Unsupported provider: {selected}")
