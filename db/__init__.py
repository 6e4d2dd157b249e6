import contextlib
import logging
from collections.abc import Iterator
from typing import Any, Annotated

from fastapi import Depends
from sqlmodel import create_engine, Session, SQLModel

# registers the tables on SQLModel.metadata
from . import models  # noqa: F401

logger = logging.getLogger(__name__)


# from: https://medium.com/@tclaitken/setting-up-a-fastapi-app-with-async-sqlalchemy-2-0-pydantic-v2-e6c540be4308
class DatabaseSessionManager:
    def __init__(self):
        self._engine = None

    def init(self, host: str, engine_kwargs: dict[str, Any] = None):
        """Create the engine and any missing tables"""
        if engine_kwargs is None:
            engine_kwargs = dict()
        self._engine = create_engine(host, **engine_kwargs)
        with self._engine.begin() as connection:
            SQLModel.metadata.create_all(connection)
        logger.debug("Database tables ready")

    def close(self):
        if self._engine is None:
            return
        self._engine.dispose()

        self._engine = None

    @contextlib.contextmanager
    def session(self) -> Iterator[Session]:
        if self._engine is None:
            raise Exception("DatabaseSessionManager is not initialized")

        session = Session(self._engine)
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


sessionmanager = DatabaseSessionManager()


def get_db_session():
    with sessionmanager.session() as session:
        yield session


DbSessionDependency = Annotated[Session, Depends(get_db_session)]
