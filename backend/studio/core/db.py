import logging
import os

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from studio.core.config import settings

logger = logging.getLogger(__name__)


def _build_engine(url: str) -> Engine:
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        db_file = url.removeprefix("sqlite:///")
        db_dir = os.path.dirname(db_file)
        if db_file != ":memory:" and db_dir:
            os.makedirs(db_dir, exist_ok=True)
    return create_engine(url, connect_args=connect_args)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless this is set per connection.
    if dbapi_connection.__class__.__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = _build_engine(settings.SQLALCHEMY_DATABASE_URI)


def init_db(db_engine: Engine | None = None) -> None:
    # Tables are registered on SQLModel.metadata when the models module is imported.
    from studio import models  # noqa: F401

    target = db_engine or engine
    SQLModel.metadata.create_all(target)
    logger.info("Database schema ready at %s", target.url)
