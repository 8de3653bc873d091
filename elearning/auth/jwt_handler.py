from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from elearning.auth.permissions import Role
from elearning.core.config import Settings, settings


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: str
    expires_at: datetime


def create_access_token(
    subject: int | str,
    role: str,
    expires_minutes: int | None = None,
    config: Settings = settings,
) -> str:
    expire_minutes = expires_minutes or config.jwt_expires_minutes
    issued_at = datetime.now(timezone.utc)
    payload = {
        "sub": str(subject),
        "role": role,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=expire_minutes),
    }
    return jwt.encode(payload, config.jwt_secret_key, algorithm=config.jwt_algorithm)


def decode_access_token(token: str, config: Settings = settings) -> dict:
    return jwt.decode(
        token,
        config.jwt_secret_key,
        algorithms=[config.jwt_algorithm],
        options={"require": ["exp", "sub"]},
    )


def verify_access_token(token: str, config: Settings = settings) -> TokenClaims:
    """Decode ``token`` and return its identity claims.

    Raises ``jwt.InvalidTokenError`` for a bad signature, an elapsed expiry
    or a payload that does not carry a numeric subject and a known role.
    """
    payload = decode_access_token(token, config)

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as exc:
        raise jwt.InvalidTokenError("Invalid token subject") from exc

    role = payload.get("role")
    if role not in {item.value for item in Role}:
        raise jwt.InvalidTokenError("Invalid token role")

    expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    return TokenClaims(user_id=user_id, role=role, expires_at=expires_at)


def token_expiry(token: str, config: Settings = settings) -> datetime:
    """Return the signed expiry of ``token`` even if it has already elapsed."""
    payload = jwt.decode(
        token,
        config.jwt_secret_key,
        algorithms=[config.jwt_algorithm],
        options={"require": ["exp", "sub"], "verify_exp": False},
    )
    return datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
