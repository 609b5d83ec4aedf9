from contextlib import contextmanager
from typing import Any, Iterator

import structlog
from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, Session, create_engine

from .errors import StorageError

logger = structlog.get_logger()


class Database:
    """Owns the engine for one app instance; handed to routers via app.state."""

    def __init__(self, url: str, echo: bool = False) -> None:
        connect_args: dict[str, Any] = {}
        if url.startswith("sqlite"):
            # Sessions are used from FastAPI's worker threads; concurrent
            # writers wait on the lock instead of failing immediately.
            connect_args = {"check_same_thread": False, "timeout": 30}
        self.engine: Engine = create_engine(url, echo=echo, connect_args=connect_args)

    def init(self) -> None:
        SQLModel.metadata.create_all(self.engine)

    def session(self) -> Session:
        return Session(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


def get_session(request: Request) -> Iterator[Session]:
    database: Database = request.app.state.db
    with database.session() as session:
        yield session


def insert_for(session: Session, model: Any) -> Any:
    """Dialect-specific INSERT supporting ``on_conflict_do_update``."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise ValueError(f"Unsupported database dialect for upserts: {dialect}")
    return insert(model)


@contextmanager
def storage_guard(session: Session, action: str, **context: Any) -> Iterator[None]:
    """Roll back and surface persistence failures as StorageError."""
    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("storage_error", action=action, error=str(exc), **context)
        raise StorageError(f"Error {action}") from exc
