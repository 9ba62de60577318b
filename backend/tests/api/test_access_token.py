"""Tests for bearer token decoding and the auth dependencies."""

import time

import jwt as pyjwt
import pytest
from fastapi import HTTPException

from app.core.auth import decode_access_token, require_admin
from app.core.config import get_settings
from app.domain.permissions import Role, UserAuthority

pytestmark = pytest.mark.unit


def _sign(payload: dict, secret: str | None = None) -> str:
    settings = get_settings()
    return pyjwt.encode(payload, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _exp(offset: int = 3600) -> int:
    return int(time.time()) + offset


def test_valid_token_maps_sub_and_role():
    actor = decode_access_token(_sign({"sub": "user-1", "role": "admin", "exp": _exp()}))

    assert actor == UserAuthority(user_id="user-1", role=Role.ADMIN)
    assert actor.is_admin


def test_role_defaults_to_user():
    actor = decode_access_token(_sign({"sub": "user-1", "exp": _exp()}))

    assert actor.role == Role.USER


def test_role_is_case_insensitive():
    actor = decode_access_token(_sign({"sub": "user-1", "role": "STAFF", "exp": _exp()}))

    assert actor.role == Role.STAFF


def test_expired_token_rejected():
    with pytest.raises(HTTPException) as exc_info:
        decode_access_token(_sign({"sub": "user-1", "exp": _exp(-60)}))

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Token expired"


def test_missing_sub_rejected():
    with pytest.raises(HTTPException) as exc_info:
        decode_access_token(_sign({"exp": _exp()}))

    assert exc_info.value.status_code == 401


def test_wrong_secret_rejected():
    with pytest.raises(HTTPException) as exc_info:
        decode_access_token(_sign({"sub": "user-1", "exp": _exp()}, secret="not-the-secret-at-all-32-bytes!!"))

    assert exc_info.value.status_code == 401


def test_unknown_role_rejected():
    with pytest.raises(HTTPException) as exc_info:
        decode_access_token(_sign({"sub": "user-1", "role": "superuser", "exp": _exp()}))

    assert exc_info.value.status_code == 401


async def test_require_admin_rejects_regular_users():
    with pytest.raises(HTTPException) as exc_info:
        await require_admin(UserAuthority(user_id="user-1"))

    assert exc_info.value.status_code == 403


async def test_require_admin_passes_admins():
    admin = UserAuthority(user_id="admin-1", role=Role.ADMIN)

    assert await require_admin(admin) is admin
