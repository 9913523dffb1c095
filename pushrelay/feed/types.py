"""Typed structures for the message change feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Protocol


class ChangeKind(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True)
class FeedChange:
    """One record-level change as reported by the store."""

    kind: ChangeKind
    doc_id: str
    data: dict[str, Any] = field(default_factory=dict)  # guard: loose-dict - Stored message documents are schemaless


@dataclass(frozen=True)
class ChangeEvent:
    """A newly added message, parsed into the fields dispatch needs."""

    kind: ChangeKind
    message_id: str
    recipient: str
    sender: str | None
    payload: dict[str, Any] = field(default_factory=dict)  # guard: loose-dict - Stored message documents are schemaless


class ChangeFeed(Protocol):
    """A long-lived subscription producing batches of changes."""

    async def start(self) -> None:
        """Attach to the store. Raises FeedSubscriptionError when that is impossible."""
        ...

    def batches(self) -> AsyncIterator[list[FeedChange]]:
        """Iterate over change batches in delivery order until closed."""
        ...

    def close(self) -> None: ...
