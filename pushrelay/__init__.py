"""pushrelay: push registration directory and message change-feed dispatcher."""

from pushrelay.directory import RegistrationDirectory
from pushrelay.feed.dispatcher import ChangeFeedDispatcher
from pushrelay.notifier import NotificationPayload, Notifier

__version__ = "0.1.0"

__all__ = ["ChangeFeedDispatcher", "NotificationPayload", "Notifier", "RegistrationDirectory"]
