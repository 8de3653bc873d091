import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from elearning.auth import jwt_handler
from elearning.auth.blacklist import TokenBlacklist
from elearning.auth.dependencies import (
    get_bearer_token,
    get_current_user,
    get_token_blacklist,
    require_admin,
)
from elearning.auth.passwords import hash_password, verify_password
from elearning.auth.permissions import Role
from elearning.database import get_db
from elearning.models.user import User
from elearning.routes.common import ApiModel, MessageResponse, raise_persistence_error

router = APIRouter(tags=['users'])
logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 120


def normalize_email(value: str) -> str:
    normalized = value.strip().lower()
    local_part, _, domain = normalized.partition('@')
    if not local_part or '.' not in domain:
        raise ValueError('A valid email address is required.')
    return normalized


class SignupRequest(ApiModel):
    name: str
    email: str
    password: str
    profile_photo: str | None = None
    phone_number: str | None = None
    courses: list[int] = []
    knowledge: str | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name is required.')
        if len(normalized) > MAX_NAME_LENGTH:
            raise ValueError(f'Name must be {MAX_NAME_LENGTH} characters or fewer.')
        return normalized

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not value:
            raise ValueError('Password is required.')
        return value


class CreateUserRequest(SignupRequest):
    role: Role = Role.USER


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return value.strip().lower()


class UserResponse(ApiModel):
    id: int
    name: str
    email: str
    role: str
    profile_photo: str | None = None
    phone_number: str | None = None
    courses: list[int] = []
    knowledge: str | None = None


class AuthResponse(ApiModel):
    message: str
    token: str
    user: UserResponse


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def create_user_record(db: Session, data: SignupRequest, role: Role) -> User:
    if find_user_by_email(db, data.email) is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='User already exists')

    user = User(
        name=data.name,
        email=data.email,
        hashed_password=hash_password(data.password),
        role=role.value,
        profile_photo=data.profile_photo,
        phone_number=data.phone_number,
        courses=list(data.courses),
        knowledge=data.knowledge,
    )
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='User already exists') from exc
    except SQLAlchemyError as exc:
        raise_persistence_error(db, exc)

    logger.info('Created user %s with role %s', user.id, user.role)
    return user


def build_auth_response(user: User, message: str) -> AuthResponse:
    token = jwt_handler.create_access_token(subject=user.id, role=user.role)
    return AuthResponse(message=message, token=token, user=UserResponse.model_validate(user))


@router.post('/signup', response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(data: SignupRequest, db: Session = Depends(get_db)):
    # Self-registration never grants elevated roles.
    user = create_user_record(db, data, Role.USER)
    return build_auth_response(user, 'User created successfully')


@router.post('/login', response_model=AuthResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = find_user_by_email(db, data.email)
    except SQLAlchemyError as exc:
        raise_persistence_error(db, exc, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if user is None or not verify_password(data.password, user.hashed_password):
        logger.warning('Failed login attempt for %s', data.email)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid email or password')

    return build_auth_response(user, 'Login successful')


@router.post('/logout', response_model=MessageResponse)
def logout(
    token: str = Depends(get_bearer_token),
    current_user: User = Depends(get_current_user),
    blacklist: TokenBlacklist = Depends(get_token_blacklist),
):
    # Already authenticated above, so only the expiry is read here.
    blacklist.revoke(token, expires_at=jwt_handler.token_expiry(token))
    purged = blacklist.purge_expired()
    if purged:
        logger.info('Purged %d expired blacklist entries', purged)
    logger.info('User %s logged out', current_user.id)
    return {'message': 'Logout successful'}


@router.get('/profile', response_model=UserResponse)
def get_profile(current_user: User = Depends(get_current_user)):
    return UserResponse.model_validate(current_user)


@router.get('/users', response_model=list[UserResponse])
def list_users(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        users = db.query(User).order_by(User.id).all()
    except SQLAlchemyError as exc:
        raise_persistence_error(db, exc, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return [UserResponse.model_validate(user) for user in users]


@router.post('/users', response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    data: CreateUserRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = create_user_record(db, data, data.role)
    return UserResponse.model_validate(user)
