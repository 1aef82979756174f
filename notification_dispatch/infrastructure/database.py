"""Database configuration and session management."""

from __future__ import annotations

from collections.abc import Callable, Generator, Mapping
from typing import TypeVar

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from notification_dispatch.config import get_settings


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


settings = get_settings()

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _create_engine(database_url: str) -> Engine:
    """Create an engine, allowing SQLite connections to cross threads."""

    connect_args: dict[str, object] = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


engine = _create_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

replica_engine = (
    _create_engine(settings.replica_database_url)
    if settings.replica_database_url
    else engine
)
ReplicaSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=replica_engine)

_shard_session_factories: dict[str, sessionmaker] = {}


def shard_session_factory(shard: str | None) -> sessionmaker:
    """Return the session factory for ``shard``; unknown shards use the primary."""

    if not shard or shard not in settings.shard_database_urls:
        return SessionLocal
    factory = _shard_session_factories.get(shard)
    if factory is None:
        factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=_create_engine(settings.shard_database_urls[shard]),
        )
        _shard_session_factories[shard] = factory
    return factory


class ShardRouter:
    """Hand out one session per shard for the duration of a dispatch run.

    The primary session is used for the default shard and for any shard in
    ``shards_on_primary``. Sessions opened by the router are closed by
    :meth:`close`; the primary session is left to its owner.
    """

    def __init__(
        self,
        primary: Session,
        *,
        factories: Mapping[str, Callable[[], Session]] | None = None,
        shards_on_primary: tuple[str, ...] = (),
    ) -> None:
        self._primary = primary
        self._factories = factories
        self._shards_on_primary = shards_on_primary
        self._sessions: dict[str, Session] = {}

    def session_for(self, shard: str | None) -> Session:
        if not shard or shard in self._shards_on_primary:
            return self._primary
        if shard in self._sessions:
            return self._sessions[shard]

        if self._factories is not None:
            factory = self._factories.get(shard)
        else:
            factory = shard_session_factory(shard)
            if factory is SessionLocal:
                factory = None
        if factory is None:
            return self._primary

        session = factory()
        self._sessions[shard] = session
        return session

    def close(self) -> None:
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()


def unique_constraint_retry(
    session: Session, operation: Callable[[], T], *, retries: int = 1
) -> T:
    """Run ``operation``, retrying after a uniqueness conflict.

    ``operation`` is expected to find or create a row and commit. When a
    concurrent writer wins the race the session is rolled back and the
    operation is run again, at which point it finds the committed row. The
    ``IntegrityError`` propagates once ``retries`` is exhausted.
    """

    attempt = 0
    while True:
        try:
            return operation()
        except IntegrityError:
            session.rollback()
            if attempt >= retries:
                raise
            attempt += 1
            logger.info("Unique constraint conflict; retrying (attempt %s)", attempt)


def initialize_database(bind: Engine | None = None) -> None:
    """Ensure all ORM models have corresponding database tables."""

    from notification_dispatch.infrastructure import models  # noqa: F401  # ensure models are imported

    Base.metadata.create_all(bind=bind or engine, checkfirst=True)


def get_db() -> Generator:
    """Yield a database session and close it afterwards."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_replica_db() -> Generator:
    """Yield a session bound to the read replica (or the primary when none is set)."""

    db = ReplicaSessionLocal()
    try:
        yield db
    finally:
        db.close()
