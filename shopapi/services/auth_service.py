"""Authentication and user management.

``AuthService`` holds the business rules for registration, login, the
self-service profile and password operations, admin user management and the
forgot/reset password flow. Every failure is raised as an ``AuthError``
subclass; the HTTP layer only translates them.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, undefer

from shopapi.auth import jwt_handler, reset_tokens
from shopapi.auth.passwords import hash_password, verify_password
from shopapi.core.config import Settings
from shopapi.errors import (
    DuplicateResource,
    EmailDeliveryError,
    Forbidden,
    InputValidationError,
    InvalidCredentials,
    NotFound,
    Unauthorized,
)
from shopapi.models.user import User
from shopapi.notifications.email import EmailSender, build_reset_message

logger = logging.getLogger(__name__)

RESET_EMAIL_SUBJECT = 'Password reset token'


@lru_cache
def _dummy_hash(rounds: int) -> str:
    return hash_password('not-a-real-password', rounds=rounds)


@dataclass
class TokenGrant:
    user: User
    token: str
    cookie_expires: datetime


class AuthService:
    def __init__(self, db: Session, settings: Settings, email_sender: EmailSender):
        self.db = db
        self.settings = settings
        self.email_sender = email_sender

    # Public

    def register(self, *, name: str, email: str, password: str) -> TokenGrant:
        user = User(
            name=name,
            email=email,
            hashed_password=hash_password(password, rounds=self.settings.bcrypt_rounds),
        )
        self.db.add(user)
        self._commit()
        self.db.refresh(user)
        logger.info('Registered user %s', user.id)
        return self._grant(user)

    def login(self, email: str | None, password: str | None) -> TokenGrant:
        if not email or not password:
            raise InvalidCredentials('Please provide an email and password')

        user = (
            self.db.query(User)
            .options(undefer(User.hashed_password))
            .filter(User.email == email.strip().lower())
            .first()
        )
        # Same error and same bcrypt cost for unknown email and wrong password.
        hashed = user.hashed_password if user is not None else _dummy_hash(self.settings.bcrypt_rounds)
        if not verify_password(password, hashed) or user is None:
            raise InvalidCredentials('Invalid credentials')

        return self._grant(user)

    def forgot_password(self, email: str, reset_url_base: str) -> User:
        user = self.db.query(User).filter(User.email == email.strip().lower()).first()
        if user is None:
            raise NotFound('There is no user with that email')

        raw_token, token_hash, expires_at = reset_tokens.generate_reset_token(
            self.settings.reset_token_expires_minutes
        )
        user.reset_password_token = token_hash
        user.reset_password_expire = expires_at
        self.db.commit()

        reset_url = f"{reset_url_base.rstrip('/')}/{raw_token}"
        try:
            self.email_sender.send(user.email, RESET_EMAIL_SUBJECT, build_reset_message(reset_url))
        except Exception as exc:
            # Never leave a live token behind for a user who was not notified.
            logger.exception('Reset email for user %s could not be sent', user.id)
            user.clear_reset_token()
            self.db.commit()
            raise EmailDeliveryError('Email could not be sent') from exc

        self.db.refresh(user)
        return user

    def reset_password(self, raw_token: str, new_password: str) -> TokenGrant:
        user = (
            self.db.query(User)
            .filter(
                User.reset_password_token == reset_tokens.hash_reset_token(raw_token),
                User.reset_password_expire > reset_tokens.utcnow(),
            )
            .first()
        )
        if user is None:
            raise InputValidationError('Invalid token')

        user.hashed_password = hash_password(new_password, rounds=self.settings.bcrypt_rounds)
        user.clear_reset_token()
        self.db.commit()
        self.db.refresh(user)
        logger.info('Password reset completed for user %s', user.id)
        return self._grant(user)

    # Authenticated user

    def get_me(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise Unauthorized('Not authorized to access this route')
        return user

    def update_me(self, user_id: int, changes: dict) -> User:
        user = self.get_me(user_id)
        return self._apply_changes(user, changes)

    def update_password(self, user_id: int, current_password: str, new_password: str) -> TokenGrant:
        user = (
            self.db.query(User)
            .options(undefer(User.hashed_password))
            .filter(User.id == user_id)
            .first()
        )
        if user is None:
            raise Unauthorized('Not authorized to access this route')
        if not verify_password(current_password, user.hashed_password):
            raise InvalidCredentials('Password is incorrect')

        user.hashed_password = hash_password(new_password, rounds=self.settings.bcrypt_rounds)
        self.db.commit()
        self.db.refresh(user)
        return self._grant(user)

    # Admin

    def list_users(self) -> list[User]:
        return self.db.query(User).order_by(User.id).all()

    def get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFound(f'User not found with id of {user_id}')
        return user

    def update_user(self, user_id: int, changes: dict) -> User:
        user = self.get_user(user_id)
        return self._apply_changes(user, changes)

    def delete_user(self, caller_id: int, target_id: int) -> None:
        # Guard order: self, existence, admin.
        if caller_id == target_id:
            raise Forbidden("You can't delete yourself")

        user = self.db.get(User, target_id)
        if user is None:
            raise NotFound(f'User not found with id of {target_id}')

        if user.role == 'admin':
            raise Forbidden('You can not delete other admins')

        self.db.delete(user)
        self.db.commit()
        logger.info('User %s deleted by admin %s', target_id, caller_id)

    # Helpers

    def _apply_changes(self, user: User, changes: dict) -> User:
        for field, value in changes.items():
            setattr(user, field, value)
        self._commit()
        self.db.refresh(user)
        return user

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateResource('Duplicate field value entered') from exc

    def _grant(self, user: User) -> TokenGrant:
        token = jwt_handler.create_access_token(subject=str(user.id), settings=self.settings)
        return TokenGrant(user=user, token=token, cookie_expires=jwt_handler.cookie_expiry(self.settings))
