"""
Implements :class:`Core` and :class:`Repo` that are used in other modules.
"""

from __future__ import annotations
import os
from sqlite3 import Connection, connect
from functools import cached_property

from web3sync.errors import StoreWriteError

CURSORS_SCHEMA = """CREATE TABLE IF NOT EXISTS cursors
    (network text PRIMARY KEY, last_processed_block integer, updated_at text)"""


class Core:
    """
    A base class for any class that wants to use
    the Sqlite3 store database.

    When deriving this class, you're providing the OS path to the
    database or an already opened connection. The connection is
    instantiated on demand, so this class is lightweight and safe
    to derive from any other class.

    Note:
        Repos that take part in the same block must share one
        connection (pass ``conn``), otherwise rows and the sync cursor
        are not committed in one transaction.

    Args:
        cache_path: OS path to the store database
        conn: an instance of database connection (overrides cache_path)
    """

    #: OS path to the store database.
    #: Can be ``None`` if :class:`sqlite3.Connection` is injected directly.
    cache_path: str | None

    def __init__(
        self,
        cache_path: str | None = None,
        conn: Connection | None = None,
    ):
        self.cache_path = cache_path
        self._conn = conn

    @cached_property
    def conn(self) -> Connection:
        """
        :class:`sqlite3.Connection` to the store database
        """
        if not self._conn is None:
            return self._conn

        if self.cache_path is None:
            self.cache_path = os.environ.get("WEB3_CACHE_PATH")

        if self.cache_path is None:
            raise ValueError(
                "Store database path is not set. "
                "Use `WEB3_CACHE_PATH` env variable or pass cache_path explicitly"
            )

        return connection_from_path(self.cache_path)


class Repo(Core):
    """
    Base class for any repo.

    Important:
        All the changes happening at the repo must be committed using
        :meth:`commit` method or rolled back using :meth:`rollback` method. Otherwise
        there's no guarantee that changes will be saved.

    Examples:

        ::

            class Widgets(Repo):
                def save(self, w: Widget):
                    cursor = self.conn.cursor()
                    cursor.execute("INSERT INTO widgets VALUES (...)", w)

            ws = Widgets(cache_path="store.db")
            ws.save(Widget(...)) # Doesn't really save anything, changes are pending
            ws.commit() # Now everything is saved
    """

    def commit(self):
        """
        Commits all changes pending on the database connection.

        Raises:
            :class:`web3sync.errors.StoreWriteError` if the commit fails
        """
        try:
            self.conn.commit()
        except Exception as e:
            raise StoreWriteError(f"Commit failed: {e}") from e

    def rollback(self):
        """
        Rollbacks all changes pending on the database connection.
        """
        self.conn.rollback()


def connection_from_path(path: str) -> Connection:
    """
    Creates a connection to a database at ``path``
    and initializes the database schema.

    Args:
        path: The absolute path to the database, or ``:memory:``

    Returns:
        An instance of sqlite3 Connection

    Note:
        The schema migrations are currently not supported.
        Tables are only created, never altered.
    """

    conn = connect(path)
    _init_db(conn)
    return conn


def _init_db(conn: Connection):
    """
    Initialize db schema

    Args:
        conn: Connection to the database
    """
    cursor = conn.cursor()
    cursor.execute(CURSORS_SCHEMA)
    conn.commit()
