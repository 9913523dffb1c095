"""pushrelay process entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from pathlib import Path

import structlog

from pushrelay.config import load_settings
from pushrelay.errors import FeedSubscriptionError
from pushrelay.logging_config import setup_logging
from pushrelay.service import PushRelayService, build_service

logger = structlog.get_logger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pushrelay", description="Push notification relay for new messages")
    parser.add_argument("--config", type=Path, default=None, help="Path to pushrelay.yml")
    parser.add_argument("--log-level", default=None, help="Override PUSHRELAY_LOG_LEVEL")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = _parse_args(argv)
    config = load_settings(args.config)
    setup_logging(level=args.log_level or config.log_level)

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def signal_handler(signum: int, _frame: object) -> None:
        sig_name = signal.Signals(signum).name
        logger.info("Received %s signal...", sig_name)
        loop.call_soon_threadsafe(shutdown_event.set)

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    service: PushRelayService | None = None
    try:
        service = build_service(config)
        await service.start()
        await shutdown_event.wait()
    except FeedSubscriptionError as e:
        logger.error("Change feed subscription failed: %s", e)
        sys.exit(1)
    except Exception as e:
        logger.error("Unexpected error: %s", e, exc_info=True)
        sys.exit(1)
    finally:
        if service is not None:
            try:
                await service.stop()
            except Exception as e:
                logger.error("Error during stop: %s", e)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
