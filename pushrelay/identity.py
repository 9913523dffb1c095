"""Bearer-token verification against Firebase Authentication."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from firebase_admin import auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions

from pushrelay.constants import ROLES_CLAIM
from pushrelay.errors import IdentityError

if TYPE_CHECKING:
    from firebase_admin import App as FirebaseApp

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Principal:
    """Verified caller identity."""

    uid: str
    roles: tuple[str, ...] = ()

    def has_role(self, role: str) -> bool:
        return role in self.roles


async def verify_identity(token: str | None, *, app: "FirebaseApp | None" = None) -> Principal:
    """Verify a Firebase ID token and return the caller it identifies.

    Raises:
        IdentityError: If the token is missing, malformed, expired, or revoked.
    """
    if not token:
        raise IdentityError("missing identity token")

    try:
        claims = await asyncio.to_thread(firebase_auth.verify_id_token, token, app=app)
    except (ValueError, firebase_exceptions.FirebaseError) as exc:
        logger.info("Identity token rejected", error=str(exc))
        raise IdentityError(f"identity token rejected: {exc}") from exc

    roles = claims.get(ROLES_CLAIM) or []
    if isinstance(roles, str):
        roles = [roles]
    return Principal(uid=str(claims["uid"]), roles=tuple(str(role) for role in roles))
