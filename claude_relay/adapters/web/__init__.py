"""Web adapter — status API."""

from claude_relay.adapters.web.status import StatusResponse, create_app

__all__ = ["StatusResponse", "create_app"]
