"""Unit tests for the Firestore snapshot listener bridge."""

import asyncio
import threading
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from pushrelay.directory import RegistrationDirectory
from pushrelay.errors import FeedSubscriptionError
from pushrelay.feed.dispatcher import ChangeFeedDispatcher
from pushrelay.feed.firestore import FirestoreChangeFeed
from pushrelay.feed.types import ChangeKind, FeedChange
from pushrelay.notifier import Notifier
from pushrelay.providers.base import SendResult
from pushrelay.task_registry import TaskRegistry


def _change(kind: str, doc_id: str, data: dict | None) -> SimpleNamespace:
    return SimpleNamespace(
        type=SimpleNamespace(name=kind),
        document=SimpleNamespace(id=doc_id, to_dict=lambda: data),
    )


def _client_capturing_callback():
    captured: dict = {}
    watch = MagicMock()

    def on_snapshot(callback):
        captured["callback"] = callback
        return watch

    client = MagicMock()
    client.collection.return_value.on_snapshot.side_effect = on_snapshot
    return client, captured, watch


def _fire_from_thread(callback, changes) -> None:
    thread = threading.Thread(target=callback, args=(None, changes, None))
    thread.start()
    thread.join()


@pytest.mark.asyncio
async def test_snapshot_callbacks_arrive_as_ordered_batches():
    client, captured, _ = _client_capturing_callback()
    feed = FirestoreChangeFeed(client, "messages")
    await feed.start()
    client.collection.assert_called_once_with("messages")

    _fire_from_thread(captured["callback"], [_change("ADDED", "m1", {"to": "u1"}), _change("ADDED", "m2", None)])
    _fire_from_thread(captured["callback"], [_change("MODIFIED", "m1", {"to": "u2"})])

    batches = feed.batches()
    first = await asyncio.wait_for(anext(batches), timeout=1)
    second = await asyncio.wait_for(anext(batches), timeout=1)

    assert first == [
        FeedChange(kind=ChangeKind.ADDED, doc_id="m1", data={"to": "u1"}),
        FeedChange(kind=ChangeKind.ADDED, doc_id="m2", data={}),
    ]
    assert second == [FeedChange(kind=ChangeKind.MODIFIED, doc_id="m1", data={"to": "u2"})]


@pytest.mark.asyncio
async def test_malformed_changes_are_dropped_but_batch_still_delivered():
    client, captured, _ = _client_capturing_callback()
    feed = FirestoreChangeFeed(client, "messages")
    await feed.start()

    captured["callback"](None, [_change("RENAMED", "m1", {}), _change("ADDED", "m2", {"to": "u1"})], None)
    captured["callback"](None, [_change("RENAMED", "m3", {})], None)
    await asyncio.sleep(0)

    batches = feed.batches()
    first = await asyncio.wait_for(anext(batches), timeout=1)
    second = await asyncio.wait_for(anext(batches), timeout=1)
    assert [change.doc_id for change in first] == ["m2"]
    assert second == []


@pytest.mark.asyncio
async def test_malformed_initial_snapshot_does_not_swallow_next_message():
    client, captured, _ = _client_capturing_callback()
    feed = FirestoreChangeFeed(client, "messages")
    directory = RegistrationDirectory()
    directory.register("tok1", "u1")
    sender = MagicMock()
    sender.max_batch_size = 500
    sender.send_batch = AsyncMock(side_effect=lambda msgs: [SendResult(target=m.target, success=True) for m in msgs])
    display_names = MagicMock()
    display_names.display_name = AsyncMock(return_value="Sam")
    tasks = TaskRegistry()
    dispatcher = ChangeFeedDispatcher(Notifier(directory, sender), display_names, tasks=tasks)
    await feed.start()

    captured["callback"](None, [_change("ADDED", "old1", {"to": "u1"}), _change("WEIRD", "old2", {})], None)
    captured["callback"](None, [_change("ADDED", "new1", {"to": "u1", "from": "s1", "text": "hi"})], None)
    feed.close()
    await asyncio.sleep(0)

    await dispatcher.run(feed)
    await tasks.join()

    sender.send_batch.assert_awaited_once()
    messages = sender.send_batch.await_args.args[0]
    assert [m.target for m in messages] == ["tok1"]
    assert messages[0].data["messageId"] == "new1"


@pytest.mark.asyncio
async def test_close_unsubscribes_and_ends_iteration():
    client, captured, watch = _client_capturing_callback()
    feed = FirestoreChangeFeed(client, "messages")
    await feed.start()

    feed.close()
    feed.close()

    received = [batch async for batch in feed.batches()]
    assert received == []
    watch.unsubscribe.assert_called_once()


@pytest.mark.asyncio
async def test_start_failure_raises_feed_subscription_error():
    client = MagicMock()
    client.collection.return_value.on_snapshot.side_effect = PermissionError("denied")
    feed = FirestoreChangeFeed(client, "messages")

    with pytest.raises(FeedSubscriptionError):
        await feed.start()


@pytest.mark.asyncio
async def test_start_is_attached_once():
    client, _, _ = _client_capturing_callback()
    feed = FirestoreChangeFeed(client, "messages")

    await feed.start()
    await feed.start()

    client.collection.return_value.on_snapshot.assert_called_once()
