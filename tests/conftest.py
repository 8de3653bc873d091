import os
from dataclasses import replace

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret-key')
os.environ.setdefault('TOKEN_BLACKLIST_BACKEND', 'memory')

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from elearning import storage  # noqa: E402
from elearning.auth import jwt_handler  # noqa: E402
from elearning.auth.blacklist import InMemoryTokenBlacklist  # noqa: E402
from elearning.auth.dependencies import get_token_blacklist  # noqa: E402
from elearning.auth.passwords import hash_password  # noqa: E402
from elearning.database import Base, get_db  # noqa: E402
from elearning.main import app  # noqa: E402
from elearning.models.user import User  # noqa: E402


@pytest.fixture
def session_factory():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def blacklist():
    return InMemoryTokenBlacklist()


@pytest.fixture
def make_user(db):
    def _make_user(email: str, role: str = 'user', name: str = 'Test User', password: str = 'secret') -> User:
        user = User(
            name=name,
            email=email,
            hashed_password=hash_password(password),
            role=role,
            courses=[],
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def admin_user(make_user):
    return make_user('admin@example.com', role='admin', name='Admin')


@pytest.fixture
def regular_user(make_user):
    return make_user('student@example.com', role='user', name='Student')


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict[str, str]:
        token = jwt_handler.create_access_token(subject=user.id, role=user.role)
        return {'Authorization': f'Bearer {token}'}

    return _auth_headers


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    target = tmp_path / 'uploads'
    monkeypatch.setattr(storage, 'settings', replace(storage.settings, upload_dir=str(target)))
    return target


@pytest.fixture
def client(session_factory, blacklist, upload_dir):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_blacklist] = lambda: blacklist
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
