"""Firebase Cloud Messaging delivery through the Firebase Admin SDK."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Sequence

import structlog
from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging as firebase_messaging

from pushrelay.constants import FCM_DRY_RUN_SENTINEL, FCM_MAX_BATCH_SIZE
from pushrelay.errors import PushProviderError
from pushrelay.providers.base import ProbeOutcome, PushMessage, SendResult

if TYPE_CHECKING:
    from firebase_admin import App as FCMApp

logger = structlog.get_logger(__name__)


def _to_fcm_message(message: PushMessage) -> firebase_messaging.Message:
    notification = None
    if message.title is not None or message.body is not None:
        notification = firebase_messaging.Notification(title=message.title, body=message.body)
    # FCM only accepts string values in the data map.
    data = {k: v if isinstance(v, str) else str(v) for k, v in message.data.items()}
    return firebase_messaging.Message(token=message.target, notification=notification, data=data or None)


class FcmPushSender:
    """PushSender backed by ``firebase_admin.messaging``.

    The SDK is synchronous, so calls run in a worker thread.
    """

    max_batch_size = FCM_MAX_BATCH_SIZE

    def __init__(self, app: "FCMApp | None" = None) -> None:
        self.app = app

    async def send_batch(self, messages: Sequence[PushMessage]) -> list[SendResult]:
        if len(messages) > self.max_batch_size:
            raise ValueError(f"FCM batch of {len(messages)} exceeds limit of {self.max_batch_size}")
        if not messages:
            return []

        fcm_messages = [_to_fcm_message(message) for message in messages]
        try:
            batch_response = await asyncio.to_thread(firebase_messaging.send_each, fcm_messages, app=self.app)
        except firebase_exceptions.FirebaseError as exc:
            raise PushProviderError(f"FCM batch send failed: {exc}") from exc

        # send_each() preserves the order of the messages.
        results: list[SendResult] = []
        for message, response in zip(messages, batch_response.responses):
            if response.success:
                results.append(SendResult(target=message.target, success=True, message_id=response.message_id))
                continue
            error = response.exception
            results.append(
                SendResult(
                    target=message.target,
                    success=False,
                    error=str(error),
                    error_code=getattr(error, "code", None),
                )
            )
        logger.debug(
            "FCM batch sent",
            count=len(results),
            success_count=batch_response.success_count,
            failure_count=batch_response.failure_count,
        )
        return results

    async def probe(self, address: str) -> ProbeOutcome:
        probe_message = firebase_messaging.Message(token=address)
        try:
            message_id = await asyncio.to_thread(firebase_messaging.send, probe_message, dry_run=True, app=self.app)
        except firebase_messaging.UnregisteredError:
            return ProbeOutcome.UNREGISTERED
        except firebase_exceptions.InvalidArgumentError:
            return ProbeOutcome.INVALID
        except firebase_exceptions.FirebaseError as exc:
            raise PushProviderError(f"FCM probe failed: {exc}") from exc

        if not str(message_id).endswith(FCM_DRY_RUN_SENTINEL):
            logger.warning("FCM dry-run probe returned a real message id", message_id=message_id)
        return ProbeOutcome.DELIVERABLE
