"""Process-wide wiring of the registration directory, sender and change feed."""

from __future__ import annotations

import firebase_admin
import structlog
from firebase_admin import credentials as firebase_credentials
from firebase_admin import firestore

from pushrelay.config.schema import PushRelayConfig
from pushrelay.constants import SHUTDOWN_TIMEOUT_S
from pushrelay.directory import RegistrationDirectory
from pushrelay.errors import InvalidPushAddressError
from pushrelay.feed.dispatcher import ChangeFeedDispatcher
from pushrelay.feed.firestore import FirestoreChangeFeed
from pushrelay.feed.types import ChangeFeed
from pushrelay.identity import Principal, verify_identity
from pushrelay.notifier import NotificationPayload, Notifier
from pushrelay.probe import check_push_address
from pushrelay.providers.base import PushSender, SendResult
from pushrelay.providers.expo import ExpoPushSender
from pushrelay.providers.fcm import FcmPushSender
from pushrelay.task_registry import TaskRegistry
from pushrelay.users import FirestoreDisplayNames

logger = structlog.get_logger(__name__)


class PushRelayService:
    """Operations offered to the HTTP layer, plus the change-feed lifecycle."""

    def __init__(
        self,
        directory: RegistrationDirectory,
        sender: PushSender,
        notifier: Notifier,
        dispatcher: ChangeFeedDispatcher,
        feed: ChangeFeed,
        *,
        accept_unregistered: bool = True,
        firebase_app: firebase_admin.App | None = None,
    ) -> None:
        self.directory = directory
        self.sender = sender
        self.notifier = notifier
        self.dispatcher = dispatcher
        self.feed = feed
        self.accept_unregistered = accept_unregistered
        self.firebase_app = firebase_app
        self._started = False

    async def register(self, address: str, uid: str) -> None:
        """Validate ``address`` with the provider, then assign it to ``uid``.

        Raises:
            InvalidPushAddressError: If the address is missing or rejected.
            PushProviderError: If the provider could not give a verdict.
        """
        if not await check_push_address(self.sender, address, accept_unregistered=self.accept_unregistered):
            logger.info("Registration rejected", uid=uid)
            raise InvalidPushAddressError(address)
        self.directory.register(address, uid)

    async def register_for(self, token: str | None, address: str) -> Principal:
        """Verify the caller's ID token and register ``address`` for them."""
        principal = await verify_identity(token, app=self.firebase_app)
        await self.register(address, principal.uid)
        return principal

    def unregister(self, address: str) -> None:
        self.directory.unregister(address)

    async def notify(self, uid: str, payload: NotificationPayload) -> list[SendResult]:
        return await self.notifier.notify(uid, payload)

    async def start(self) -> None:
        """Subscribe to the change feed and start dispatching.

        Raises:
            FeedSubscriptionError: If the subscription cannot be established.
        """
        if self._started:
            return
        await self.feed.start()
        self.dispatcher.tasks.spawn(self.dispatcher.run(self.feed), name="change-feed-dispatcher")
        self._started = True
        logger.info("Pushrelay started")

    async def stop(self, timeout: float = SHUTDOWN_TIMEOUT_S) -> None:
        self.feed.close()
        await self.dispatcher.tasks.shutdown(timeout=timeout)
        self._started = False
        logger.info("Pushrelay stopped")


def _init_firebase_app(config: PushRelayConfig) -> firebase_admin.App:
    firebase_cfg = config.firebase
    if firebase_cfg.credentials_path:
        credential = firebase_credentials.Certificate(firebase_cfg.credentials_path)
    else:
        credential = firebase_credentials.ApplicationDefault()
    options = {"projectId": firebase_cfg.project_id} if firebase_cfg.project_id else None
    if firebase_cfg.app_name:
        return firebase_admin.initialize_app(credential, options, name=firebase_cfg.app_name)
    return firebase_admin.initialize_app(credential, options)


def _build_sender(config: PushRelayConfig, app: firebase_admin.App) -> PushSender:
    if config.provider == "expo":
        return ExpoPushSender(
            access_token=config.expo.access_token,
            base_url=config.expo.base_url,
            timeout_s=config.expo.timeout_s,
        )
    return FcmPushSender(app=app)


def build_service(config: PushRelayConfig) -> PushRelayService:
    """Construct a fully wired service from configuration."""
    app = _init_firebase_app(config)
    db = firestore.client(app)

    directory = RegistrationDirectory()
    sender = _build_sender(config, app)
    notifier = Notifier(directory, sender)
    display_names = FirestoreDisplayNames(
        db,
        collection=config.feed.users_collection,
        field=config.feed.display_name_field,
    )
    dispatcher = ChangeFeedDispatcher(notifier, display_names, fields=config.feed, tasks=TaskRegistry())
    feed = FirestoreChangeFeed(db, config.feed.messages_collection)

    logger.info(
        "Pushrelay configured",
        provider=config.provider,
        messages_collection=config.feed.messages_collection,
        accept_unregistered=config.probe.accept_unregistered,
    )
    return PushRelayService(
        directory,
        sender,
        notifier,
        dispatcher,
        feed,
        accept_unregistered=config.probe.accept_unregistered,
        firebase_app=app,
    )
