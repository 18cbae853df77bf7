"""Database handle and session helpers.

The application owns exactly one `Database` instance. It is created and
opened when the FastAPI app starts, stored on `app.state.db`, and closed
at shutdown. Request handlers receive a `Session` bound to that handle
through the `get_session` dependency instead of importing a global engine.
"""

from typing import Iterator

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine

# imported for its side effect of registering tables on SQLModel.metadata
from . import models  # noqa: F401


class Database:
    """Explicit lifecycle wrapper around a SQLAlchemy engine."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Engine | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("database is not open")
        return self._engine

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def open(self) -> "Database":
        """Create the engine and make sure tables exist.

        Table creation is idempotent; schema migrations are out of scope
        for this service.
        """
        if self._engine is not None:
            return self
        connect_args = {}
        if self.url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self._engine = create_engine(self.url, echo=self.echo, connect_args=connect_args)
        SQLModel.metadata.create_all(self._engine)
        return self

    def close(self) -> None:
        """Dispose the engine and its connection pool."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def session(self) -> Session:
        return Session(self.engine)

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()


def get_session(request: Request) -> Iterator[Session]:
    """Yield a database `Session` for FastAPI dependency injection.

    The session comes from the `Database` opened by the app lifespan and
    is closed when the request scope finishes.
    """
    db: Database = request.app.state.db
    with db.session() as session:
        yield session
