"""Tests for launcher.py — CLI parsing and startup validation."""

from claude_relay.config import RelayConfig
from claude_relay.launcher import build_pipeline, main, parse_args


class _Executor:
    async def invoke(self, prompt):
        raise AssertionError("not expected")


def test_parse_args_defaults():
    args = parse_args([])
    assert args.timeout is None
    assert args.test is False


def test_parse_args_flags():
    args = parse_args(["--timeout", "30", "--test"])
    assert args.timeout == 30
    assert args.test is True


def test_build_pipeline_uses_config():
    config = RelayConfig(discord_token="t", task_timeout_seconds=12, max_history_messages=8)
    executor = _Executor()
    pipeline = build_pipeline(config, executor)
    assert pipeline.config is config
    assert pipeline.runner.executor is executor
    assert pipeline.runner.timeout == 12
    assert pipeline.assembler.max_history == 8


def test_main_rejects_missing_token(monkeypatch):
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "")
    assert main([]) == 1


def test_main_test_mode_requires_caller(monkeypatch):
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "token")
    monkeypatch.setenv("CALLER_BOT_TOKEN", "")
    monkeypatch.setenv("TEST_CHANNEL_ID", "")
    assert main(["--test"]) == 1


def test_build_pipeline_shares_stats():
    first = build_pipeline(RelayConfig(discord_token="t"), _Executor())
    first.stats["delivered"] += 2
    second = build_pipeline(RelayConfig(discord_token="t").with_test_mode(9), _Executor(), stats=first.stats)
    assert second.stats is first.stats
    assert second.snapshot()["delivered"] == 2
