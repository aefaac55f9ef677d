import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite://')

from shopapi.core.config import Settings  # noqa: E402
from shopapi.database import Base  # noqa: E402
from shopapi.errors import EmailDeliveryError  # noqa: E402
from shopapi.models.user import User  # noqa: E402
from shopapi.services.auth_service import AuthService  # noqa: E402


class FakeEmailSender:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.error: Exception | None = None
        self.sent = []

    def send(self, recipient: str, subject: str, message: str) -> None:
        if self.error is not None:
            raise self.error
        if self.fail:
            raise EmailDeliveryError('SMTP unavailable')
        self.sent.append((recipient, subject, message))

    def last_reset_token(self) -> str:
        _, _, message = self.sent[-1]
        return message.rsplit('/', 1)[1].strip()


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret_key='test-secret-key-for-signing-tokens-32b', bcrypt_rounds=4)


@pytest.fixture
def session_factory():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine, tables=[User.__table__])
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine, tables=[User.__table__])
        engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def email_sender() -> FakeEmailSender:
    return FakeEmailSender()


@pytest.fixture
def service(db, settings, email_sender) -> AuthService:
    return AuthService(db, settings, email_sender)


@pytest.fixture
def make_user(service, db):
    def _make_user(email: str, password: str = 'pw123456', role: str = 'user', name: str = 'Test User') -> User:
        user = service.register(name=name, email=email, password=password).user
        if role != 'user':
            user.role = role
            db.commit()
        return user

    return _make_user
