"""In-memory index of which push addresses belong to which users."""

from __future__ import annotations

import threading

import structlog

logger = structlog.get_logger(__name__)


class RegistrationDirectory:
    """Bidirectional user <-> push address index.

    ``_by_user`` maps a user id to the set of addresses registered for it and
    ``_by_address`` maps each address back to its single owner. Both maps are
    changed under one lock, so readers on any thread never see them disagree.

    Nothing is persisted: a new process starts empty and devices register again.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_user: dict[str, set[str]] = {}
        self._by_address: dict[str, str] = {}

    def register(self, address: str, uid: str) -> None:
        """Assign ``address`` to ``uid``, taking it away from any previous owner."""
        with self._lock:
            previous = self._unregister_locked(address)
            self._by_user.setdefault(uid, set()).add(address)
            self._by_address[address] = uid
        if previous is not None and previous != uid:
            logger.info("Push address moved between users", previous_uid=previous, uid=uid)
        else:
            logger.debug("Push address registered", uid=uid)

    def unregister(self, address: str) -> None:
        """Forget ``address``. Unknown addresses are ignored."""
        with self._lock:
            previous = self._unregister_locked(address)
        if previous is not None:
            logger.debug("Push address unregistered", uid=previous)

    def _unregister_locked(self, address: str) -> str | None:
        uid = self._by_address.pop(address, None)
        if uid is None:
            return None
        addresses = self._by_user.get(uid)
        if addresses is not None:
            addresses.discard(address)
            if not addresses:
                del self._by_user[uid]
        return uid

    def lookup(self, uid: str) -> frozenset[str]:
        """Return a snapshot of the addresses registered for ``uid``."""
        with self._lock:
            return frozenset(self._by_user.get(uid, ()))

    def is_registered(self, address: str) -> bool:
        with self._lock:
            return address in self._by_address

    def owner_of(self, address: str) -> str | None:
        with self._lock:
            return self._by_address.get(address)

    def user_count(self) -> int:
        """Number of users with at least one registered address."""
        with self._lock:
            return len(self._by_user)

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_address)
