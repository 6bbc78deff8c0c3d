from __future__ import annotations

from typing import Generator

from labshelf.core.config import settings
from labshelf.models import Base
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

_connect_args = (
    {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
)

engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    connect_args=_connect_args,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    # Single key/value table; created in place rather than migrated.
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
