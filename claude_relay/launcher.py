"""Entry point — wire config, executor, pipeline and Discord together."""

import argparse
import asyncio
import sys
from collections import Counter
from typing import List, Optional

import uvicorn

from claude_relay.adapters.discord.bot import RelayBot
from claude_relay.adapters.llm.executor import create_executor
from claude_relay.adapters.web.status import create_app
from claude_relay.config import RelayConfig, validate
from claude_relay.e2e import E2ERunner
from claude_relay.pipeline import DispatchPipeline
from claude_relay.ports.outbound import TaskExecutorPort
from claude_relay.runner import ExternalTaskRunner


def _log(msg: str):
    print(msg, file=sys.stderr)


def build_pipeline(
    config: RelayConfig,
    executor: Optional[TaskExecutorPort] = None,
    stats: Optional[Counter] = None,
) -> DispatchPipeline:
    """Create a pipeline for ``config``. A new config means a new pipeline.

    Pass the previous pipeline's ``stats`` to keep counting across the swap.
    """
    executor = executor or create_executor(config.ai_provider, config.model)
    runner = ExternalTaskRunner(executor, timeout=config.task_timeout_seconds)
    return DispatchPipeline(config, runner, stats=stats)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="claude-relay",
        description="Relay Discord mentions to a Claude (or Codex) CLI and post the reply.",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=None,
        metavar="SECONDS",
        help="stop the bot after SECONDS (development only)",
    )
    parser.add_argument(
        "--test",
        action="store_true",
        help="test mode: run the end-to-end scenarios with the caller bot, then exit",
    )
    return parser.parse_args(argv)


def _status_server(bot: RelayBot, port: int) -> uvicorn.Server:
    app = create_app(lambda: bot.pipeline)
    return uvicorn.Server(uvicorn.Config(app, host="0.0.0.0", port=port, log_level="warning"))


async def run_relay(config: RelayConfig, timeout_seconds: Optional[int] = None) -> int:
    """Run until stopped (or ``timeout_seconds``). Returns the exit code."""
    executor = create_executor(config.ai_provider, config.model)
    bot = RelayBot(build_pipeline(config, executor))

    tasks = [asyncio.create_task(bot.start(config.discord_token))]
    server = None
    if config.status_port:
        server = _status_server(bot, config.status_port)
        tasks.append(asyncio.create_task(server.serve()))
        _log(f"[launcher] status API on port {config.status_port}")

    exit_code = 0
    try:
        if config.test_mode:
            runner = E2ERunner(
                bot,
                config.caller_token,
                config.test_channel_id,
                on_caller_ready=lambda caller_id: bot.use_pipeline(
                    build_pipeline(
                        config.with_test_mode(caller_id),
                        executor,
                        stats=bot.pipeline.stats,
                    )
                ),
            )
            run_task = asyncio.create_task(runner.run())
            done, _ = await asyncio.wait({run_task, tasks[0]}, return_when=asyncio.FIRST_COMPLETED)
            if run_task not in done:
                run_task.cancel()
                tasks[0].result()
                raise RuntimeError("bot stopped before the E2E scenarios finished")
            run_task.result()
            passed = runner.all_passed()
            _log(f"[launcher] E2E finished: {'all passed' if passed else 'failures'}")
            exit_code = 0 if passed else 1
        else:
            await asyncio.wait_for(asyncio.gather(*tasks), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        _log("[launcher] timeout reached, shutting down")
    except Exception as e:
        _log(f"[launcher] bot failed: {e}")
        exit_code = 1
    finally:
        if server is not None:
            server.should_exit = True
        await bot.close()
        for task in tasks:
            task.cancel()
    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    config = RelayConfig.from_env()
    if args.test:
        config = config.with_test_mode()

    _log(f"[launcher] starting Claude relay{' (test mode)' if config.test_mode else ''}")
    problems = validate(config)
    if problems:
        for p in problems:
            _log(f"[launcher] config error: {p}")
        return 1

    try:
        return asyncio.run(run_relay(config, timeout_seconds=args.timeout))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
