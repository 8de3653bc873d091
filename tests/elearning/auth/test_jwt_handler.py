from dataclasses import replace
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from elearning.auth import jwt_handler
from elearning.core.config import settings


def test_verify_access_token_returns_identity_claims() -> None:
    token = jwt_handler.create_access_token(subject=42, role='admin')

    claims = jwt_handler.verify_access_token(token)

    assert claims.user_id == 42
    assert claims.role == 'admin'


def test_access_token_expires_one_hour_after_issue() -> None:
    before = datetime.now(timezone.utc)
    token = jwt_handler.create_access_token(subject=1, role='user')

    claims = jwt_handler.verify_access_token(token)

    assert settings.jwt_expires_minutes == 60
    assert before + timedelta(minutes=59) < claims.expires_at <= before + timedelta(minutes=61)


def test_verify_access_token_rejects_expired_token() -> None:
    token = jwt_handler.create_access_token(subject=1, role='user', expires_minutes=-1)

    with pytest.raises(jwt.ExpiredSignatureError):
        jwt_handler.verify_access_token(token)


def test_verify_access_token_rejects_token_signed_with_another_secret() -> None:
    other_config = replace(settings, jwt_secret_key='rotated-secret')
    token = jwt_handler.create_access_token(subject=1, role='user', config=other_config)

    with pytest.raises(jwt.InvalidSignatureError):
        jwt_handler.verify_access_token(token)


def test_token_expiry_reads_elapsed_expiry() -> None:
    token = jwt_handler.create_access_token(subject=1, role='user', expires_minutes=-1)

    expires_at = jwt_handler.token_expiry(token)

    assert expires_at < datetime.now(timezone.utc)


def test_token_expiry_still_checks_signature() -> None:
    other_config = replace(settings, jwt_secret_key='rotated-secret')
    token = jwt_handler.create_access_token(subject=1, role='user', config=other_config)

    with pytest.raises(jwt.InvalidSignatureError):
        jwt_handler.token_expiry(token)


@pytest.mark.parametrize(
    'payload',
    [
        {'sub': 'not-a-number', 'role': 'user'},
        {'sub': '1', 'role': 'superuser'},
        {'sub': '1'},
    ],
)
def test_verify_access_token_rejects_malformed_payload(payload: dict) -> None:
    payload = {**payload, 'exp': datetime.now(timezone.utc) + timedelta(minutes=5)}
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    with pytest.raises(jwt.InvalidTokenError):
        jwt_handler.verify_access_token(token)


def test_decode_access_token_requires_expiry() -> None:
    token = jwt.encode({'sub': '1', 'role': 'user'}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    with pytest.raises(jwt.MissingRequiredClaimError):
        jwt_handler.decode_access_token(token)


def test_verify_access_token_rejects_garbage() -> None:
    with pytest.raises(jwt.InvalidTokenError):
        jwt_handler.verify_access_token('not.a.jwt')
