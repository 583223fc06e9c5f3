"""LLM adapters — Claude and Codex CLI executors."""

from claude_relay.adapters.llm.executor import (
    ClaudeCliExecutor,
    CodexCliExecutor,
    create_executor,
    run_cancellable,
)

__all__ = [
    "ClaudeCliExecutor",
    "CodexCliExecutor",
    "create_executor",
    "run_cancellable",
]
