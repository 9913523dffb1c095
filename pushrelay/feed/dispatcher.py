"""Turn newly added messages from the change feed into push notifications."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from pushrelay.config.schema import FeedConfig
from pushrelay.feed.types import ChangeEvent, ChangeFeed, ChangeKind, FeedChange
from pushrelay.notifier import NotificationPayload
from pushrelay.task_registry import TaskRegistry

if TYPE_CHECKING:
    from pushrelay.notifier import Notifier
    from pushrelay.users import DisplayNameResolver

logger = structlog.get_logger(__name__)


class ChangeFeedDispatcher:
    """Dispatch one fan-out per message added after the subscription started.

    When a listener attaches, the store reports every existing message as
    added. That first batch is discarded; only later ``added`` changes are
    dispatched, and edits or deletions never are. Nothing raised while
    handling a batch reaches the feed.
    """

    def __init__(
        self,
        notifier: "Notifier",
        display_names: "DisplayNameResolver",
        *,
        fields: FeedConfig | None = None,
        tasks: TaskRegistry | None = None,
    ) -> None:
        self.notifier = notifier
        self.display_names = display_names
        self.fields = fields or FeedConfig()
        self.tasks = tasks if tasks is not None else TaskRegistry()
        self.first_snapshot_pending = True

    def accept_batch(self, changes: list[FeedChange]) -> list[ChangeEvent]:
        """Return the events of ``changes`` that should be dispatched.

        Must be called in feed order: the first call swallows the initial snapshot.
        """
        try:
            if self.first_snapshot_pending:
                self.first_snapshot_pending = False
                logger.info("Suppressed initial snapshot", change_count=len(changes))
                return []

            events: list[ChangeEvent] = []
            for change in changes:
                if change.kind is not ChangeKind.ADDED:
                    continue
                event = self._parse(change)
                if event is not None:
                    events.append(event)
            return events
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Failed to read change batch")
            return []

    def _parse(self, change: FeedChange) -> ChangeEvent | None:
        data = change.data
        recipient = data.get(self.fields.recipient_field)
        if not isinstance(recipient, str) or not recipient:
            logger.warning("Message has no recipient; skipping", message_id=change.doc_id)
            return None
        sender = data.get(self.fields.sender_field)
        return ChangeEvent(
            kind=change.kind,
            message_id=change.doc_id,
            recipient=recipient,
            sender=str(sender) if sender is not None else None,
            payload=data,
        )

    def _build_payload(self, event: ChangeEvent, sender_name: str) -> NotificationPayload:
        body: Any = event.payload.get(self.fields.body_field)
        data = {"messageId": event.message_id}
        if event.sender:
            data["sender"] = event.sender
        return NotificationPayload(title=sender_name, body=str(body) if body is not None else None, data=data)

    async def dispatch(self, event: ChangeEvent) -> None:
        """Resolve the sender's name and notify the recipient's devices. Never raises."""
        try:
            sender_name = await self.display_names.display_name(event.sender or "")
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.warning(
                "Could not resolve sender display name; skipping message",
                message_id=event.message_id,
                sender=event.sender,
                error=str(exc),
            )
            return

        try:
            await self.notifier.notify(event.recipient, self._build_payload(event, sender_name))
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Notification dispatch failed", message_id=event.message_id)

    async def process_batch(self, changes: list[FeedChange]) -> None:
        """Accept and dispatch one batch inline."""
        try:
            for event in self.accept_batch(changes):
                await self.dispatch(event)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Change batch processing failed")

    async def run(self, feed: ChangeFeed) -> None:
        """Consume ``feed`` until it closes.

        Batches are accepted in delivery order; each resulting event is
        dispatched as its own tracked task so slow sends never hold up intake.
        """
        logger.info("Change feed dispatcher started")
        async for changes in feed.batches():
            for event in self.accept_batch(changes):
                self.tasks.spawn(self.dispatch(event), name=f"dispatch:{event.message_id}")
        logger.info("Change feed dispatcher stopped")
