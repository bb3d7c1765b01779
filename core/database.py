"""
core/database.py -- Shared SQLAlchemy engine factory and schema metadata.

Every store (auth/store.py, shop/store.py) registers its tables on the single
`metadata` object below and receives an Engine from create_db_engine(). Each
store creates its own tables on construction. One engine means one connection
pool per process; its concurrency discipline is SQLAlchemy's, not ours.

Usage:
    engine = create_db_engine("sqlite:///shopadmin.db")
    users = UserStore(engine)
    products = ProductStore(engine)
    engine.dispose()

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or shop/.
"""

from datetime import datetime, timezone

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine

metadata = MetaData()


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign keys on every new SQLite connection.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. foreign_keys is off by default in SQLite,
    which would let a user reference a role that does not exist.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(db_url: str) -> Engine:
    """Build the process-wide Engine for db_url.

    SQLite gets check_same_thread=False because FastAPI runs sync route
    handlers in a thread pool; the pool hands connections across threads.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
