import logging
from collections.abc import Callable

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from elearning.auth import jwt_handler
from elearning.auth.blacklist import TokenBlacklist, build_token_blacklist
from elearning.auth.permissions import Role, is_role_allowed
from elearning.core.config import settings
from elearning.database import get_db
from elearning.models.user import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

token_blacklist = build_token_blacklist(settings)


def get_token_blacklist() -> TokenBlacklist:
    return token_blacklist


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    token = credentials.credentials.strip() if credentials else ""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access denied. No token provided.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


def authenticate_token(token: str, db: Session, blacklist: TokenBlacklist) -> User:
    # Revocation is checked first so a logged-out token is rejected even
    # while its signature and expiry are still valid.
    if blacklist.is_revoked(token):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Token is blacklisted. Please log in again.",
        )

    try:
        claims = jwt_handler.verify_access_token(token)
    except jwt.InvalidTokenError as exc:
        logger.warning("Rejected bearer token: %s", exc)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token.") from exc

    user = db.get(User, claims.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    return user


def get_current_user(
    request: Request,
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
    blacklist: TokenBlacklist = Depends(get_token_blacklist),
) -> User:
    user = authenticate_token(token, db, blacklist)
    request.state.user = user
    return user


def require_roles(*roles: Role | str) -> Callable[..., User]:
    allowed_roles = tuple(roles)

    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if not is_role_allowed(current_user.role, allowed_roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied. Insufficient permissions.",
            )
        return current_user

    return role_checker


require_admin = require_roles(Role.ADMIN)
