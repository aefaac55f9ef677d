import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


load_dotenv()

DEFAULT_JWT_SECRET = "change-me"


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_env: str = "development"
    database_url: str = "sqlite:///./shop.db"

    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 30
    jwt_cookie_expire_days: int = 30

    reset_token_expires_minutes: int = 10
    bcrypt_rounds: int = 12

    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from: str = ""
    smtp_use_tls: bool = True

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        smtp_user = os.getenv("SMTP_USER", "")
        return cls(
            app_env=os.getenv("APP_ENV", "development"),
            database_url=os.getenv("DATABASE_URL", "sqlite:///./shop.db"),
            jwt_secret_key=os.getenv("JWT_SECRET_KEY", DEFAULT_JWT_SECRET),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            jwt_expires_days=int(os.getenv("JWT_EXPIRES_DAYS", "30")),
            jwt_cookie_expire_days=int(os.getenv("JWT_COOKIE_EXPIRE_DAYS", "30")),
            reset_token_expires_minutes=int(os.getenv("RESET_TOKEN_EXPIRES_MINUTES", "10")),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
            smtp_host=os.getenv("SMTP_HOST", "smtp.gmail.com"),
            smtp_port=int(os.getenv("SMTP_PORT", "587")),
            smtp_user=smtp_user,
            smtp_password=os.getenv("SMTP_PASSWORD", ""),
            smtp_from=os.getenv("SMTP_FROM", smtp_user),
            smtp_use_tls=_get_bool(os.getenv("SMTP_USE_TLS"), default=True),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


def validate_runtime_config(settings: Settings) -> None:
    if settings.is_production and settings.jwt_secret_key == DEFAULT_JWT_SECRET:
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
