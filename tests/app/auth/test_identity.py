"""Tests for the header identity provider."""

from uuid import uuid4

import pytest

from app.auth.identity import USER_ID_HEADER, HeaderIdentityProvider, require_moderator
from app.exceptions import AuthenticationError, AuthorizationError


def test_resolves_user_from_header(user_id):
    user = HeaderIdentityProvider(moderator_ids=frozenset()).current_user(
        {USER_ID_HEADER: f" {user_id} "}
    )
    assert user.id == user_id
    assert not user.is_moderator


@pytest.mark.parametrize("headers", [{}, {USER_ID_HEADER: ""}, {USER_ID_HEADER: "abc"}])
def test_missing_or_invalid_header(headers):
    with pytest.raises(AuthenticationError):
        HeaderIdentityProvider(moderator_ids=frozenset()).current_user(headers)


def test_moderator_flag(user_id):
    provider = HeaderIdentityProvider(moderator_ids=frozenset({str(user_id)}))
    user = provider.current_user({USER_ID_HEADER: str(user_id)})
    assert user.is_moderator
    assert require_moderator(user) is user


def test_moderator_ids_from_settings(monkeypatch):
    moderator = uuid4()
    monkeypatch.setenv("MODERATOR_IDS", f"{str(moderator).upper()}, ")
    user = HeaderIdentityProvider().current_user({USER_ID_HEADER: str(moderator)})
    assert user.is_moderator


def test_require_moderator_rejects_regular_user(user_id):
    user = HeaderIdentityProvider(moderator_ids=frozenset()).current_user(
        {USER_ID_HEADER: str(user_id)}
    )
    with pytest.raises(AuthorizationError):
        require_moderator(user)
