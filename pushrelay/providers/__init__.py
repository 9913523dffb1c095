"""Push delivery providers."""

from pushrelay.providers.base import ProbeOutcome, PushMessage, PushSender, SendResult
from pushrelay.providers.expo import ExpoPushSender
from pushrelay.providers.fcm import FcmPushSender

__all__ = ["ExpoPushSender", "FcmPushSender", "ProbeOutcome", "PushMessage", "PushSender", "SendResult"]
