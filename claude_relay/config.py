"""Configuration loaded from the environment."""

__version__ = "0.1.0"

import os
import sys
from dataclasses import dataclass, replace
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)

# Discord rejects messages above this many characters
DISCORD_MESSAGE_LIMIT = 2000

# "<@id> " for the longest (20-digit) snowflake id
MAX_FRAMING_LENGTH = len("<@") + 20 + len("> ")

# framing plus room for a short body
MIN_MESSAGE_LENGTH = MAX_FRAMING_LENGTH + 16

SUPPORTED_AI_PROVIDERS = ("claude", "codex")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, using default {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, using default {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _env_provider() -> str:
    provider = os.getenv("AI_PROVIDER", "claude").strip().lower()
    if provider not in SUPPORTED_AI_PROVIDERS:
        _stderr_print(f"Unsupported AI_PROVIDER={provider!r}, falling back to 'claude'")
        return "claude"
    return provider


@dataclass(frozen=True)
class RelayConfig:
    """Immutable runtime configuration, passed once to the pipeline.

    Switching test mode produces a new instance via ``with_test_mode``;
    a running pipeline never sees its mode change.
    """

    discord_token: str = ""
    caller_token: str = ""
    test_channel_id: int = 0
    ai_provider: str = "claude"
    model: str = ""
    max_message_length: int = DISCORD_MESSAGE_LIMIT
    max_history_messages: int = 50
    task_timeout_seconds: float = 1800.0
    outbound_rate_per_second: float = 5.0
    mention_author: bool = True
    test_mode: bool = False
    designated_test_caller_id: Optional[int] = None
    status_port: int = 0

    @classmethod
    def from_env(cls) -> "RelayConfig":
        """Create RelayConfig from environment variables."""
        caller_id = _env_int("DESIGNATED_TEST_CALLER_ID", 0)
        return cls(
            discord_token=os.getenv("DISCORD_BOT_TOKEN", "").strip(),
            caller_token=os.getenv("CALLER_BOT_TOKEN", "").strip(),
            test_channel_id=_env_int("TEST_CHANNEL_ID", 0),
            ai_provider=_env_provider(),
            model=os.getenv("AI_MODEL", "").strip(),
            max_message_length=_env_int("MAX_MESSAGE_LENGTH", DISCORD_MESSAGE_LIMIT),
            max_history_messages=_env_int("MAX_HISTORY_MESSAGES", 50),
            task_timeout_seconds=_env_float("TASK_TIMEOUT_SECONDS", 1800.0),
            outbound_rate_per_second=_env_float("OUTBOUND_RATE_PER_SECOND", 5.0),
            mention_author=_env_bool("MENTION_AUTHOR", True),
            test_mode=_env_bool("RELAY_TEST_MODE", False),
            designated_test_caller_id=caller_id or None,
            status_port=_env_int("STATUS_PORT", 0),
        )

    def with_test_mode(self, caller_id: Optional[int] = None) -> "RelayConfig":
        """Return a copy in test mode. Replies no longer mention the author."""
        return replace(
            self,
            test_mode=True,
            mention_author=False,
            designated_test_caller_id=(
                caller_id if caller_id is not None else self.designated_test_caller_id
            ),
        )


def validate(config: RelayConfig) -> List[str]:
    """Return a list of configuration problems (empty when valid)."""
    problems: List[str] = []
    if not config.discord_token:
        problems.append("DISCORD_BOT_TOKEN environment variable is required")
    if config.test_mode:
        if not config.caller_token:
            problems.append("CALLER_BOT_TOKEN is required in test mode")
        if not config.test_channel_id:
            problems.append("TEST_CHANNEL_ID is required in test mode")
    if config.max_message_length < MIN_MESSAGE_LENGTH:
        problems.append(f"MAX_MESSAGE_LENGTH must be at least {MIN_MESSAGE_LENGTH}")
    elif config.max_message_length > DISCORD_MESSAGE_LIMIT:
        problems.append(f"MAX_MESSAGE_LENGTH must not exceed {DISCORD_MESSAGE_LIMIT}")
    if config.max_history_messages <= 0:
        problems.append("MAX_HISTORY_MESSAGES must be positive")
    if config.task_timeout_seconds <= 0:
        problems.append("TASK_TIMEOUT_SECONDS must be positive")
    if config.outbound_rate_per_second <= 0:
        problems.append("OUTBOUND_RATE_PER_SECOND must be positive")
    return problems
