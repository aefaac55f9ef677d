"""Single-use password reset tokens.

The raw token is only ever handed to the user (inside the reset link); the
database keeps its sha256 digest and an expiry timestamp.
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone

TOKEN_BYTES = 20


def hash_reset_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_reset_token(expires_minutes: int) -> tuple[str, str, datetime]:
    """Return ``(raw_token, token_hash, expires_at)``; ``expires_at`` is naive UTC."""
    raw_token = secrets.token_hex(TOKEN_BYTES)
    expires_at = utcnow() + timedelta(minutes=expires_minutes)
    return raw_token, hash_reset_token(raw_token), expires_at
