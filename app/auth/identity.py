"""
Identity provider boundary.

Authentication happens upstream; the gateway forwards the resolved user id in
``X-User-Id``. Everything in the chat core requires a resolved user.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID

from fastapi import Depends, Request

from app.config import get_settings
from app.exceptions import AuthenticationError, AuthorizationError

USER_ID_HEADER = "X-User-Id"


@dataclass(frozen=True)
class CurrentUser:
    id: UUID
    is_moderator: bool = False


class IdentityProvider(Protocol):
    def current_user(self, headers) -> CurrentUser: ...


class HeaderIdentityProvider:
    """Trusts the user id header set by the auth gateway."""

    def __init__(self, moderator_ids: Optional[frozenset[str]] = None) -> None:
        self._moderator_ids = (
            moderator_ids
            if moderator_ids is not None
            else get_settings().moderator_id_set
        )

    def current_user(self, headers) -> CurrentUser:
        raw = headers.get(USER_ID_HEADER)
        if not raw:
            raise AuthenticationError("Not authenticated")
        try:
            user_id = UUID(raw.strip())
        except ValueError as e:
            raise AuthenticationError("Invalid user id") from e
        return CurrentUser(
            id=user_id, is_moderator=str(user_id) in self._moderator_ids
        )


def get_identity_provider() -> IdentityProvider:
    return HeaderIdentityProvider()


def get_current_user(
    request: Request,
    identity: IdentityProvider = Depends(get_identity_provider),
) -> CurrentUser:
    """FastAPI dependency resolving the calling user or raising AuthenticationError."""
    return identity.current_user(request.headers)


def require_moderator(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_moderator:
        raise AuthorizationError("Moderator access required")
    return user
