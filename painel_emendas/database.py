"""
SQLAlchemy engine, session factory and declarative base.

``get_db`` is the FastAPI dependency every router uses to obtain a
request-scoped ``Session``; tests replace it through
``app.dependency_overrides``.
"""

from __future__ import annotations

from collections.abc import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from painel_emendas.config import get_settings

settings = get_settings()

_connect_args: dict[str, object] = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # SQLite connections are shared with FastAPI's worker threads
    _connect_args["check_same_thread"] = False

engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.SQL_ECHO,
    pool_pre_ping=True,
    connect_args=_connect_args,
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    """Yield a database session and close it when the request finishes."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
