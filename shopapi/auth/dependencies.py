from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWTError
from sqlalchemy.orm import Session

from shopapi.auth import jwt_handler
from shopapi.core.config import Settings, get_settings
from shopapi.database import get_db
from shopapi.errors import Forbidden, Unauthorized
from shopapi.models.user import User
from shopapi.notifications.email import EmailSender, SmtpEmailSender
from shopapi.services.auth_service import AuthService

security = HTTPBearer(auto_error=False)

NOT_AUTHORIZED = "Not authorized to access this route"


def get_email_sender(settings: Settings = Depends(get_settings)) -> EmailSender:
    return SmtpEmailSender(settings)


def get_auth_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    email_sender: EmailSender = Depends(get_email_sender),
) -> AuthService:
    return AuthService(db, settings, email_sender)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    token: str | None = Cookie(default=None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    # Header wins over the cookie when both are sent.
    raw_token = credentials.credentials if credentials else token
    if not raw_token:
        raise Unauthorized(NOT_AUTHORIZED)

    try:
        payload = jwt_handler.decode_access_token(raw_token, settings)
    except PyJWTError as exc:
        raise Unauthorized(NOT_AUTHORIZED) from exc

    subject = payload.get("sub")
    if not subject or not str(subject).isdigit():
        raise Unauthorized(NOT_AUTHORIZED)

    user = db.get(User, int(subject))
    if user is None:
        raise Unauthorized(NOT_AUTHORIZED)
    return user


def require_roles(*roles: str):
    def guard(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise Forbidden(f"User role {current_user.role} is not authorized to access this route")
        return current_user

    return guard


require_admin = require_roles("admin")
