"""Explicit, caller-owned database sessions.

There is no process-wide connection. A caller opens a session, passes it to
each ``DBService`` operation and the session closes its connection when the
``with`` block exits, whatever the outcome::

    with open_session() as session:
        DBService().execute_sql_file(session, "dump_mysql.sql")
"""
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from sqlshift.utils.logger import setup_logger
from .connection_factory import get_connection, resolve_connection_params

logger = setup_logger("db_session")


class DBSession:
    """A single open connection plus the parameters it was opened with."""

    def __init__(self, connection, params: Dict[str, Any]):
        self.connection = connection
        self.params = params
        self.closed = False

    @property
    def database(self) -> Optional[str]:
        return self.params.get("database")

    def cursor(self):
        if self.closed:
            raise RuntimeError("Database session is closed")
        return self.connection.cursor()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self.connection.close()
            logger.info("Database connection closed")
        except Exception as e:
            logger.error(f"Error closing database connection: {e}")


@contextmanager
def open_session(overrides: Optional[Dict[str, Any]] = None, *, with_database: bool = True) -> Iterator[DBSession]:
    params = resolve_connection_params(overrides)
    connection = get_connection(params, with_database=with_database)
    logger.info(f"Connected to MySQL at {params.get('host')}")
    session = DBSession(connection, params)
    try:
        yield session
    finally:
        session.close()
