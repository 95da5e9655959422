"""
Database handle for SQLAlchemy.

The engine and its connection pool are owned by a `Database` object that the
app factory builds and passes to the store; nothing here is created at import
time.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    """Base class for ORM models."""
    pass


def _build_engine(url: str, pool_size: int, max_overflow: int, pool_timeout_s: float) -> Engine:
    if url.startswith("sqlite"):
        # SQLite needs check_same_thread=False because store calls run in a threadpool.
        connect_args = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every checkout sees an empty database.
            return create_engine(url, connect_args=connect_args, poolclass=StaticPool)
        return create_engine(
            url,
            connect_args=connect_args,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout_s,
        )

    return create_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout_s,
        pool_pre_ping=True,
    )


class Database:
    """Owns an engine (bounded pool) and the session factory bound to it."""

    def __init__(
        self,
        url: str,
        pool_size: int = 10,
        max_overflow: int = 0,
        pool_timeout_s: float = 30.0,
    ):
        self.url = url
        self.engine = _build_engine(url, pool_size, max_overflow, pool_timeout_s)
        self._sessions = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session for one store operation, then close it."""
        db = self._sessions()
        try:
            yield db
        finally:
            db.close()

    def create_all(self) -> None:
        # Import registers the table on Base.metadata.
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
