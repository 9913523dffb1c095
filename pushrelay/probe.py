"""Validate a push address before it is accepted for registration."""

from __future__ import annotations

import structlog

from pushrelay.providers.base import ProbeOutcome, PushSender

logger = structlog.get_logger(__name__)


async def check_push_address(sender: PushSender, address: object, *, accept_unregistered: bool = True) -> bool:
    """Return whether ``address`` should be accepted for registration.

    A dry-run probe is sent through ``sender``. Malformed addresses are
    rejected. Addresses the provider reports as no longer registered are
    accepted unless ``accept_unregistered`` is False.

    Raises:
        PushProviderError: If the provider failed for any other reason.
    """
    if not isinstance(address, str) or not address.strip():
        return False

    outcome = await sender.probe(address)
    if outcome is ProbeOutcome.INVALID:
        logger.info("Push address rejected by provider probe")
        return False
    if outcome is ProbeOutcome.UNREGISTERED:
        logger.info("Push address reported unregistered", accepted=accept_unregistered)
        return accept_unregistered
    return True
