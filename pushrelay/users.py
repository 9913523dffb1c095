"""Sender display-name lookup against the Firestore users collection."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Protocol

from pushrelay.constants import DEFAULT_DISPLAY_NAME_FIELD, DEFAULT_USERS_COLLECTION
from pushrelay.errors import DisplayNameError

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient


class DisplayNameResolver(Protocol):
    async def display_name(self, uid: str) -> str: ...


class FirestoreDisplayNames:
    """Reads ``<collection>/<uid>`` and returns its display-name field."""

    def __init__(
        self,
        client: "FirestoreClient",
        collection: str = DEFAULT_USERS_COLLECTION,
        field: str = DEFAULT_DISPLAY_NAME_FIELD,
    ) -> None:
        self.client = client
        self.collection = collection
        self.field = field

    async def display_name(self, uid: str) -> str:
        """Return the display name of ``uid``.

        Raises:
            DisplayNameError: If the document or the field is missing.
        """
        if not uid:
            raise DisplayNameError("sender uid is empty")

        doc_ref = self.client.collection(self.collection).document(uid)
        snapshot = await asyncio.to_thread(doc_ref.get)
        if not snapshot.exists:
            raise DisplayNameError(f"no {self.collection} document for {uid}")

        name = (snapshot.to_dict() or {}).get(self.field)
        if not name:
            raise DisplayNameError(f"{self.collection}/{uid} has no {self.field}")
        return str(name)
