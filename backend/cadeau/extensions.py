# Overview: Flask extension instances and engine-level hooks for SQLite.

import sqlite3

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()
migrate = Migrate()


@event.listens_for(Engine, "connect")
def _set_sqlite_pragmas(dbapi_conn, _):
    """Enforce foreign keys and wait on write locks when using SQLite."""
    if not isinstance(dbapi_conn, sqlite3.Connection):
        return
    cur = dbapi_conn.cursor()
    try:
        cur.execute("PRAGMA foreign_keys=ON;")
        # Concurrent writers queue instead of failing with "database is locked"
        cur.execute("PRAGMA busy_timeout=30000;")
    finally:
        cur.close()
