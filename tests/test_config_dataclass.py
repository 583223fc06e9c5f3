"""Tests for the RelayConfig dataclass."""

import dataclasses

import pytest

from claude_relay.config import (
    DISCORD_MESSAGE_LIMIT,
    MIN_MESSAGE_LENGTH,
    RelayConfig,
    validate,
)
from claude_relay.delivery import DeliveryScheduler

_ENV_KEYS = (
    "DISCORD_BOT_TOKEN",
    "CALLER_BOT_TOKEN",
    "TEST_CHANNEL_ID",
    "AI_PROVIDER",
    "AI_MODEL",
    "MAX_MESSAGE_LENGTH",
    "MAX_HISTORY_MESSAGES",
    "TASK_TIMEOUT_SECONDS",
    "OUTBOUND_RATE_PER_SECOND",
    "MENTION_AUTHOR",
    "RELAY_TEST_MODE",
    "DESIGNATED_TEST_CALLER_ID",
    "STATUS_PORT",
)


@pytest.fixture
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestRelayConfig:
    def test_defaults(self):
        c = RelayConfig()
        assert c.max_message_length == DISCORD_MESSAGE_LIMIT == 2000
        assert c.max_history_messages == 50
        assert c.task_timeout_seconds == 1800.0
        assert c.outbound_rate_per_second == 5.0
        assert c.ai_provider == "claude"
        assert c.mention_author is True
        assert c.test_mode is False
        assert c.designated_test_caller_id is None

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            RelayConfig().test_mode = True

    def test_from_env_defaults(self, clean_env):
        c = RelayConfig.from_env()
        assert c == RelayConfig()

    def test_from_env(self, clean_env):
        clean_env.setenv("DISCORD_BOT_TOKEN", " token ")
        clean_env.setenv("AI_PROVIDER", "Codex")
        clean_env.setenv("AI_MODEL", "gpt-5")
        clean_env.setenv("MAX_MESSAGE_LENGTH", "1500")
        clean_env.setenv("TASK_TIMEOUT_SECONDS", "90")
        clean_env.setenv("MENTION_AUTHOR", "false")
        clean_env.setenv("RELAY_TEST_MODE", "1")
        clean_env.setenv("DESIGNATED_TEST_CALLER_ID", "1234")
        c = RelayConfig.from_env()
        assert c.discord_token == "token"
        assert c.ai_provider == "codex"
        assert c.model == "gpt-5"
        assert c.max_message_length == 1500
        assert c.task_timeout_seconds == 90.0
        assert c.mention_author is False
        assert c.test_mode is True
        assert c.designated_test_caller_id == 1234

    def test_invalid_numbers_fall_back(self, clean_env):
        clean_env.setenv("MAX_HISTORY_MESSAGES", "lots")
        clean_env.setenv("OUTBOUND_RATE_PER_SECOND", "fast")
        c = RelayConfig.from_env()
        assert c.max_history_messages == 50
        assert c.outbound_rate_per_second == 5.0

    def test_unknown_provider_falls_back(self, clean_env):
        clean_env.setenv("AI_PROVIDER", "gemini")
        assert RelayConfig.from_env().ai_provider == "claude"


class TestWithTestMode:
    def test_returns_new_instance(self):
        base = RelayConfig(discord_token="t")
        test = base.with_test_mode(99)
        assert base.test_mode is False
        assert test.test_mode is True
        assert test.designated_test_caller_id == 99
        assert test.mention_author is False
        assert test.discord_token == "t"

    def test_keeps_existing_caller(self):
        base = RelayConfig(designated_test_caller_id=5)
        assert base.with_test_mode().designated_test_caller_id == 5


class TestValidate:
    def test_valid(self):
        assert validate(RelayConfig(discord_token="t")) == []

    def test_missing_token(self):
        problems = validate(RelayConfig())
        assert any("DISCORD_BOT_TOKEN" in p for p in problems)

    def test_test_mode_requirements(self):
        problems = validate(RelayConfig(discord_token="t").with_test_mode())
        assert any("CALLER_BOT_TOKEN" in p for p in problems)
        assert any("TEST_CHANNEL_ID" in p for p in problems)

    def test_message_length_bounds(self):
        assert validate(RelayConfig(discord_token="t", max_message_length=0))
        assert validate(RelayConfig(discord_token="t", max_message_length=2001))

    def test_message_length_must_fit_framing(self):
        problems = validate(RelayConfig(discord_token="t", max_message_length=20))
        assert any("MAX_MESSAGE_LENGTH" in p for p in problems)
        assert validate(RelayConfig(discord_token="t", max_message_length=MIN_MESSAGE_LENGTH)) == []

    def test_minimum_leaves_room_for_longest_mention(self):
        scheduler = DeliveryScheduler(mention_author=True)
        longest_id = 2 ** 64 - 1
        assert MIN_MESSAGE_LENGTH - scheduler.reserved_length(longest_id) > 0

    def test_non_positive_limits(self):
        config = RelayConfig(
            discord_token="t",
            max_history_messages=0,
            task_timeout_seconds=0,
            outbound_rate_per_second=-1,
        )
        assert len(validate(config)) == 3
