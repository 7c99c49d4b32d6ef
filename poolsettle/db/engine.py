"""Engine and session factories for the persistence layer."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .utils import resolve_sqlite_url

load_dotenv()
# Repository root, used to anchor relative SQLite paths.
ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_SQLITE_URL = resolve_sqlite_url(
    os.getenv("DB_URL", "sqlite:///./dev.db"), ROOT_DIR
)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """Create an engine for ``database_url`` (``DB_URL`` when omitted).

    SQLite connections get foreign key enforcement switched on, so cascades
    from rounds to fixtures, entries and settlements behave as on a server
    database.
    """
    url = database_url or DEFAULT_SQLITE_URL
    engine = create_engine(url, echo=echo)
    if url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def get_sessionmaker(engine: Engine) -> sessionmaker:
    # Settlement rows stay readable after the transaction commits.
    return sessionmaker(bind=engine, expire_on_commit=False)
