"""Fan a notification out to every device registered for a user."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from pushrelay.directory import RegistrationDirectory
from pushrelay.providers.base import PushMessage, PushSender, SendResult
from pushrelay.utils import chunked

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NotificationPayload:
    """Content shared by every message of one fan-out."""

    title: str | None = None
    body: str | None = None
    data: dict[str, str] = field(default_factory=dict)

    def for_address(self, address: str) -> PushMessage:
        return PushMessage(target=address, title=self.title, body=self.body, data=dict(self.data))


class Notifier:
    """Look up a user's addresses and deliver one message to each, in provider-sized chunks."""

    def __init__(self, directory: RegistrationDirectory, sender: PushSender) -> None:
        self.directory = directory
        self.sender = sender

    async def notify(self, uid: str, payload: NotificationPayload) -> list[SendResult]:
        """Send ``payload`` to every address registered for ``uid``.

        A user with no registered addresses is not an error; nothing is sent.
        A chunk whose send call raises is reported as failed for each of its
        targets and the remaining chunks are still sent.
        """
        addresses = self.directory.lookup(uid)
        if not addresses:
            logger.debug("No registered devices; skipping notification", uid=uid)
            return []

        messages = [payload.for_address(address) for address in sorted(addresses)]
        logger.info("Sending notification", uid=uid, device_count=len(messages))

        results: list[SendResult] = []
        for chunk in chunked(messages, self.sender.max_batch_size):
            try:
                chunk_results = await self.sender.send_batch(chunk)
            except Exception as exc:  # pylint: disable=broad-exception-caught
                logger.warning("Push batch send failed", uid=uid, chunk_size=len(chunk), error=str(exc))
                chunk_results = [SendResult(target=m.target, success=False, error=str(exc)) for m in chunk]

            for result in chunk_results:
                if not result.success:
                    logger.warning(
                        "Push delivery failed for device",
                        uid=uid,
                        error=result.error,
                        error_code=result.error_code,
                    )
            results.extend(chunk_results)

        logger.info(
            "Notification sent",
            uid=uid,
            delivered=sum(1 for r in results if r.success),
            failed=sum(1 for r in results if not r.success),
        )
        return results
