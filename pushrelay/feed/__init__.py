"""Message change feed and the dispatcher that consumes it."""

from pushrelay.feed.dispatcher import ChangeFeedDispatcher
from pushrelay.feed.firestore import FirestoreChangeFeed
from pushrelay.feed.types import ChangeEvent, ChangeFeed, ChangeKind, FeedChange

__all__ = ["ChangeEvent", "ChangeFeed", "ChangeFeedDispatcher", "ChangeKind", "FeedChange", "FirestoreChangeFeed"]
