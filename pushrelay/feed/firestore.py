"""Firestore collection listener exposed as an async stream of change batches.

``on_snapshot`` invokes its callback on a Firestore watch thread. The callback
only converts the changes and hands the batch to the event loop queue, so the
watch thread is never blocked by dispatch work.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, AsyncIterator

import structlog

from pushrelay.errors import FeedSubscriptionError
from pushrelay.feed.types import ChangeKind, FeedChange

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient

logger = structlog.get_logger(__name__)


def _to_feed_change(change: Any) -> FeedChange:
    """Convert a Firestore ``DocumentChange`` into a FeedChange."""
    kind = ChangeKind[change.type.name]
    document = change.document
    return FeedChange(kind=kind, doc_id=document.id, data=document.to_dict() or {})


class FirestoreChangeFeed:
    """Listens to one Firestore collection for the lifetime of the process."""

    def __init__(self, client: "FirestoreClient", collection: str) -> None:
        self.client = client
        self.collection = collection
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: asyncio.Queue[list[FeedChange] | None] = asyncio.Queue()
        self._watch: Any = None
        self._closed = False

    async def start(self) -> None:
        """Attach the snapshot listener.

        Raises:
            FeedSubscriptionError: If the listener cannot be attached.
        """
        if self._watch is not None:
            return
        self._loop = asyncio.get_running_loop()
        try:
            self._watch = self.client.collection(self.collection).on_snapshot(self._on_snapshot)
        except Exception as exc:
            raise FeedSubscriptionError(f"Could not subscribe to collection {self.collection!r}: {exc}") from exc
        logger.info("Change feed subscribed", collection=self.collection)

    def _on_snapshot(self, _col_snapshot: Any, changes: list[Any], _read_time: Any) -> None:
        # Runs on the Firestore watch thread; an exception here would stop the listener.
        # Every callback is enqueued, even when empty, so the first one stays the snapshot.
        batch: list[FeedChange] = []
        for change in changes:
            try:
                batch.append(_to_feed_change(change))
            except Exception:  # pylint: disable=broad-exception-caught
                logger.exception("Dropping malformed change", collection=self.collection)
        self._enqueue(batch)

    def _enqueue(self, item: list[FeedChange] | None) -> None:
        if self._loop is None:
            return
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, item)
        except RuntimeError:
            pass  # Loop closed

    async def batches(self) -> AsyncIterator[list[FeedChange]]:
        while True:
            batch = await self._queue.get()
            if batch is None:
                return
            yield batch

    def close(self) -> None:
        """Detach the listener and end ``batches()``."""
        if self._closed:
            return
        self._closed = True
        if self._watch is not None:
            try:
                self._watch.unsubscribe()
            except Exception as exc:  # pylint: disable=broad-exception-caught
                logger.warning("Change feed unsubscribe failed", collection=self.collection, error=str(exc))
        self._enqueue(None)
        logger.info("Change feed closed", collection=self.collection)
