import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from elearning.auth import jwt_handler
from elearning.auth.dependencies import authenticate_token, get_bearer_token, require_roles
from elearning.auth.permissions import Role, is_role_allowed


@pytest.mark.parametrize(
    ('role', 'allowed', 'expected'),
    [
        ('admin', (Role.ADMIN,), True),
        (Role.ADMIN, ('admin',), True),
        ('user', (Role.ADMIN,), False),
        ('user', (Role.USER, Role.ADMIN), True),
        (None, (Role.USER,), False),
    ],
)
def test_is_role_allowed(role, allowed, expected) -> None:
    assert is_role_allowed(role, allowed) is expected


def test_get_bearer_token_requires_credentials() -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_bearer_token(None)

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'Access denied. No token provided.'


def test_get_bearer_token_returns_raw_token() -> None:
    credentials = HTTPAuthorizationCredentials(scheme='Bearer', credentials='abc.def.ghi')

    assert get_bearer_token(credentials) == 'abc.def.ghi'


def test_authenticate_token_resolves_user(db, blacklist, regular_user) -> None:
    token = jwt_handler.create_access_token(subject=regular_user.id, role=regular_user.role)

    user = authenticate_token(token, db, blacklist)

    assert user.id == regular_user.id
    assert user.email == 'student@example.com'


def test_authenticate_token_rejects_revoked_token_before_expiry(db, blacklist, regular_user) -> None:
    revoked = jwt_handler.create_access_token(subject=regular_user.id, role=regular_user.role)
    blacklist.revoke(revoked)
    fresh = jwt_handler.create_access_token(subject=regular_user.id, role=regular_user.role, expires_minutes=30)

    with pytest.raises(HTTPException) as exception_info:
        authenticate_token(revoked, db, blacklist)

    assert exception_info.value.status_code == 403
    assert exception_info.value.detail == 'Token is blacklisted. Please log in again.'
    assert authenticate_token(fresh, db, blacklist).id == regular_user.id


def test_authenticate_token_rejects_revoked_token_even_when_malformed(db, blacklist) -> None:
    blacklist.revoke('garbage')

    with pytest.raises(HTTPException) as exception_info:
        authenticate_token('garbage', db, blacklist)

    assert exception_info.value.detail == 'Token is blacklisted. Please log in again.'


def test_authenticate_token_rejects_invalid_token(db, blacklist) -> None:
    with pytest.raises(HTTPException) as exception_info:
        authenticate_token('not.a.jwt', db, blacklist)

    assert exception_info.value.status_code == 403
    assert exception_info.value.detail == 'Invalid token.'


def test_authenticate_token_returns_not_found_for_deleted_user(db, blacklist) -> None:
    token = jwt_handler.create_access_token(subject=999, role='user')

    with pytest.raises(HTTPException) as exception_info:
        authenticate_token(token, db, blacklist)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'User not found.'


def test_require_roles_rejects_insufficient_role(regular_user) -> None:
    checker = require_roles(Role.ADMIN)

    with pytest.raises(HTTPException) as exception_info:
        checker(current_user=regular_user)

    assert exception_info.value.status_code == 403
    assert exception_info.value.detail == 'Access denied. Insufficient permissions.'


def test_require_roles_passes_allowed_user_through(admin_user, regular_user) -> None:
    checker = require_roles(Role.USER, Role.ADMIN)

    assert checker(current_user=admin_user) is admin_user
    assert checker(current_user=regular_user) is regular_user
