from collections.abc import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from shopapi.core.config import Settings, get_settings


Base = declarative_base()


def build_engine(settings: Settings) -> Engine:
    connect_args = {}
    if settings.database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(settings.database_url, connect_args=connect_args)


engine = build_engine(get_settings())

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def init_schema(bind: Engine | None = None) -> None:
    from shopapi.models import user  # noqa: F401  registers the table on Base

    Base.metadata.create_all(bind=bind or engine)


def dispose_engine() -> None:
    engine.dispose()


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
