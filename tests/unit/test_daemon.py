"""Unit tests for the process entrypoint."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from pushrelay import daemon
from pushrelay.config.schema import PushRelayConfig
from pushrelay.errors import FeedSubscriptionError
from pushrelay.logging_config import setup_logging


@pytest.fixture
def patched_entrypoint(monkeypatch):
    monkeypatch.setattr(daemon, "load_settings", MagicMock(return_value=PushRelayConfig()))
    monkeypatch.setattr(daemon, "setup_logging", MagicMock())
    monkeypatch.setattr(daemon.signal, "signal", MagicMock())


@pytest.mark.asyncio
async def test_subscription_failure_exits_nonzero(monkeypatch, patched_entrypoint):
    service = MagicMock()
    service.start = AsyncMock(side_effect=FeedSubscriptionError("denied"))
    service.stop = AsyncMock()
    monkeypatch.setattr(daemon, "build_service", MagicMock(return_value=service))

    with pytest.raises(SystemExit) as excinfo:
        await daemon.main([])

    assert excinfo.value.code == 1
    service.stop.assert_awaited_once()


@pytest.mark.asyncio
async def test_signal_triggers_graceful_stop(monkeypatch, patched_entrypoint):
    service = MagicMock()
    service.start = AsyncMock()
    service.stop = AsyncMock()
    monkeypatch.setattr(daemon, "build_service", MagicMock(return_value=service))

    task = asyncio.create_task(daemon.main(["--log-level", "DEBUG"]))
    await asyncio.sleep(0.01)
    handler = daemon.signal.signal.call_args_list[0].args[1]
    handler(daemon.signal.SIGTERM, None)
    await asyncio.wait_for(task, timeout=1)

    service.start.assert_awaited_once()
    service.stop.assert_awaited_once()
    daemon.setup_logging.assert_called_once_with(level="DEBUG")


@pytest.mark.unit
def test_setup_logging_filters_below_level():
    setup_logging("WARNING")
    logger = structlog.get_logger("pushrelay.test")

    assert structlog.is_configured()
    assert logger.info("hidden") is None
    structlog.reset_defaults()
