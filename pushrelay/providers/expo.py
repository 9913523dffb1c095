"""Expo push service delivery over HTTP."""

from __future__ import annotations

import re
from typing import Any, Sequence

import httpx
import structlog

from pushrelay.constants import EXPO_MAX_BATCH_SIZE, EXPO_PUSH_URL, EXPO_TIMEOUT_S
from pushrelay.errors import PushProviderError
from pushrelay.providers.base import ProbeOutcome, PushMessage, SendResult

logger = structlog.get_logger(__name__)

_EXPO_TOKEN_RE = re.compile(r"^Expo(nent)?PushToken\[.+\]$")
_UUID_TOKEN_RE = re.compile(r"^[a-z\d]{8}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{12}$", re.IGNORECASE)


def is_expo_push_token(token: object) -> bool:
    """Return True when ``token`` has the shape of an Expo push token."""
    if not isinstance(token, str):
        return False
    return bool(_EXPO_TOKEN_RE.match(token) or _UUID_TOKEN_RE.match(token))


def _to_expo_message(message: PushMessage) -> dict[str, Any]:  # guard: loose-dict - Expo wire format
    payload: dict[str, Any] = {"to": message.target}
    if message.title is not None:
        payload["title"] = message.title
    if message.body is not None:
        payload["body"] = message.body
    if message.data:
        payload["data"] = dict(message.data)
    return payload


class ExpoPushSender:
    """PushSender backed by the Expo push API.

    Expo has no dry-run mode, so ``probe`` only checks the token format.
    """

    max_batch_size = EXPO_MAX_BATCH_SIZE

    def __init__(
        self,
        *,
        access_token: str | None = None,
        base_url: str = EXPO_PUSH_URL,
        timeout_s: float = EXPO_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.access_token = access_token
        self.base_url = base_url
        self.timeout_s = timeout_s
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    async def send_batch(self, messages: Sequence[PushMessage]) -> list[SendResult]:
        if len(messages) > self.max_batch_size:
            raise ValueError(f"Expo batch of {len(messages)} exceeds limit of {self.max_batch_size}")
        if not messages:
            return []

        body = [_to_expo_message(message) for message in messages]
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                response = await client.post(self.base_url, json=body, headers=self._headers())
        except httpx.HTTPError as exc:
            raise PushProviderError(f"Expo push request failed: {exc}") from exc

        if response.status_code >= 400:
            raise PushProviderError(f"Expo push failed (HTTP {response.status_code}): {response.text[:200]}")

        try:
            tickets = response.json().get("data")
        except Exception as exc:
            raise PushProviderError(f"Expo returned non-JSON (HTTP {response.status_code})") from exc

        if not isinstance(tickets, list) or len(tickets) != len(messages):
            ticket_count = len(tickets) if isinstance(tickets, list) else 0
            raise PushProviderError(f"Expo returned {ticket_count} tickets for {len(messages)} messages")
        if not all(isinstance(ticket, dict) for ticket in tickets):
            raise PushProviderError("Expo returned a malformed ticket")

        results: list[SendResult] = []
        for message, ticket in zip(messages, tickets):
            if ticket.get("status") == "ok":
                results.append(SendResult(target=message.target, success=True, message_id=ticket.get("id")))
                continue
            details = ticket.get("details") or {}
            results.append(
                SendResult(
                    target=message.target,
                    success=False,
                    error=ticket.get("message") or "expo push error",
                    error_code=details.get("error"),
                )
            )
        logger.debug("Expo batch sent", count=len(results))
        return results

    async def probe(self, address: str) -> ProbeOutcome:
        if not is_expo_push_token(address):
            return ProbeOutcome.INVALID
        return ProbeOutcome.DELIVERABLE
