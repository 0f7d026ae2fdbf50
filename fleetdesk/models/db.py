"""Flask-SQLAlchemy extension object and engine hooks."""
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event

db = SQLAlchemy()


def install_sqlite_locking(engine) -> None:
    """
    Make every SQLite transaction start with BEGIN IMMEDIATE.

    pysqlite defers BEGIN until the first write, so two sessions can both read
    "available" before either inserts. Taking the write lock up front
    serializes check-then-insert units across connections.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")
