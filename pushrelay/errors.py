"""Exception types raised by pushrelay."""


class PushRelayError(Exception):
    """Base class for pushrelay errors."""


class InvalidPushAddressError(PushRelayError, ValueError):
    """A registration address was missing, malformed, or rejected by the provider."""

    def __init__(self, address: object, reason: str = "invalid push address") -> None:
        super().__init__(f"{reason}: {address!r}")
        self.address = address
        self.reason = reason


class PushProviderError(PushRelayError):
    """The push provider failed in a way that is not a per-address verdict."""


class IdentityError(PushRelayError):
    """A bearer token could not be verified."""


class DisplayNameError(PushRelayError, LookupError):
    """A sender's display name could not be resolved."""


class FeedSubscriptionError(PushRelayError):
    """The change-feed subscription could not be established."""
