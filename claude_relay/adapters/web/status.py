"""Status API — read-only view of the running relay."""

from datetime import datetime, timezone
from typing import Callable, Dict

from fastapi import FastAPI
from pydantic import BaseModel

from claude_relay.config import __version__
from claude_relay.pipeline import DispatchPipeline


class LimitsResponse(BaseModel):
    max_message_length: int
    max_history_messages: int
    task_timeout_seconds: float
    outbound_rate_per_second: float


class StatusResponse(BaseModel):
    version: str
    started_at: str
    ai_provider: str
    test_mode: bool
    in_flight: int
    results: Dict[str, int]
    limits: LimitsResponse


def create_app(get_pipeline: Callable[[], DispatchPipeline]) -> FastAPI:
    """Build the status app. ``get_pipeline`` returns the pipeline currently in use."""
    app = FastAPI(title="Claude Relay")
    started_at = datetime.now(timezone.utc).isoformat()

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/status", response_model=StatusResponse)
    async def status():
        pipeline = get_pipeline()
        config = pipeline.config
        return StatusResponse(
            version=__version__,
            started_at=started_at,
            ai_provider=config.ai_provider,
            test_mode=config.test_mode,
            in_flight=pipeline.in_flight,
            results=pipeline.snapshot(),
            limits=LimitsResponse(
                max_message_length=config.max_message_length,
                max_history_messages=config.max_history_messages,
                task_timeout_seconds=config.task_timeout_seconds,
                outbound_rate_per_second=config.outbound_rate_per_second,
            ),
        )

    return app
