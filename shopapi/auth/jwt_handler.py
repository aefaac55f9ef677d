from datetime import datetime, timedelta, timezone

import jwt

from shopapi.core.config import Settings


def create_access_token(subject: str, settings: Settings, expires_days: int | None = None) -> str:
    expire_days = expires_days or settings.jwt_expires_days
    now = datetime.now(timezone.utc)
    payload = {"sub": subject, "exp": now + timedelta(days=expire_days), "iat": now}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> dict:
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def cookie_expiry(settings: Settings) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=settings.jwt_cookie_expire_days)
