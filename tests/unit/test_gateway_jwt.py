"""Unit tests for JWT verification and the actor dependencies."""
from datetime import UTC, datetime, timedelta

import pytest
from fastapi import HTTPException
from jose import jwt

from config.settings import settings
from src.bx_common.actor import Actor
from src.bx_common.enums import ActorRole
from src.bx_common.errors import ForbiddenError, InvalidCredentialsError
from src.bx_gateway.auth.dependencies import get_current_actor, require_admin
from src.bx_gateway.auth.jwt_handler import actor_from_token, create_access_token, decode_token


def _token(**claims) -> str:
    now = datetime.now(UTC)
    payload = {"sub": "user-1", "role": "buyer", "type": "access", "iat": now,
               "exp": now + timedelta(minutes=5)}
    payload.update(claims)
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def test_access_token_contains_role() -> None:
    token = create_access_token("user-123", ActorRole.SELLER)
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "user-123"
    assert payload["role"] == "seller"
    assert payload["type"] == "access"


def test_actor_from_token_roundtrip() -> None:
    actor = actor_from_token(create_access_token("admin-9", ActorRole.ADMIN))
    assert actor == Actor("admin-9", ActorRole.ADMIN)
    assert actor.is_admin


def test_expired_token_rejected() -> None:
    token = _token(exp=datetime.now(UTC) - timedelta(seconds=1))
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_wrong_secret_rejected() -> None:
    token = jwt.encode({"sub": "u", "type": "access"}, "other-secret", algorithm="HS256")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_refresh_token_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token(_token(type="refresh"))


def test_unknown_role_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        actor_from_token(_token(role="superuser"))


def test_missing_subject_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        actor_from_token(_token(sub=""))


async def test_get_current_actor_maps_to_401() -> None:
    with pytest.raises(HTTPException) as exc_info:
        await get_current_actor("garbage")
    assert exc_info.value.status_code == 401


async def test_require_admin() -> None:
    admin = Actor("a", ActorRole.ADMIN)
    assert await require_admin(admin) is admin
    with pytest.raises(ForbiddenError):
        await require_admin(Actor("b", ActorRole.SELLER))
