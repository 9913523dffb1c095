"""Provider-neutral push delivery types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, Sequence, runtime_checkable


@dataclass(frozen=True)
class PushMessage:
    """One notification addressed to one push address."""

    target: str
    title: str | None = None
    body: str | None = None
    data: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SendResult:
    """Delivery outcome for a single message of a batch."""

    target: str
    success: bool
    message_id: str | None = None
    error: str | None = None
    error_code: str | None = None


class ProbeOutcome(str, Enum):
    """Provider verdict on a dry-run send."""

    DELIVERABLE = "deliverable"
    INVALID = "invalid"
    UNREGISTERED = "unregistered"


@runtime_checkable
class PushSender(Protocol):
    """Capability to deliver push messages through one provider.

    ``max_batch_size`` is the provider's documented per-call limit; callers
    must chunk before calling ``send_batch``.
    """

    max_batch_size: int

    async def send_batch(self, messages: Sequence[PushMessage]) -> list[SendResult]:
        """Send one chunk of messages.

        Returns:
            One SendResult per message, in the same order as ``messages``.

        Raises:
            PushProviderError: If the whole call failed.
        """
        ...

    async def probe(self, address: str) -> ProbeOutcome:
        """Check whether ``address`` can receive pushes without notifying the device.

        Raises:
            PushProviderError: For any provider failure other than an address verdict.
        """
        ...
