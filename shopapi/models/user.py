"""User model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import deferred, validates

from shopapi.database import Base

ROLES = ("user", "admin")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    """Represents a registered shop user."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    # Loaded only on request, e.g. with undefer(User.hashed_password).
    hashed_password = deferred(Column(String, nullable=False))
    role = Column(String, nullable=False, default="user")  # user/admin
    reset_password_token = Column(String, index=True, nullable=True)
    reset_password_expire = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    @validates("role")
    def validate_role(self, _key: str, value: str) -> str:
        if value not in ROLES:
            raise ValueError(f"Role must be one of: {', '.join(ROLES)}")
        return value

    @validates("email")
    def validate_email(self, _key: str, value: str) -> str:
        return value.strip().lower()

    def clear_reset_token(self) -> None:
        self.reset_password_token = None
        self.reset_password_expire = None
