from __future__ import annotations
from sqlite3 import Error as SqliteError
from typing import Any, Dict, List

from web3sync.core import Repo
from web3sync.errors import StoreWriteError
from web3sync.records.record import Record, RecordKind
from web3sync.utils import utc_now_iso


class RecordsRepo(Repo):
    """
    Appending and reading :class:`Record` of one :class:`RecordKind`.

    Rows are never updated or deleted. Inserts stay pending until
    :meth:`commit`, and :meth:`query_all` only returns rows up to
    the last committed id, so readers never see a half-processed block.

    Args:
        kind: Schema of the table
        kwargs: Args for the :class:`web3sync.core.Core`
    """

    #: Schema of the table
    kind: RecordKind
    _committed_id: int

    def __init__(self, kind: RecordKind, **kwargs):
        super().__init__(**kwargs)
        self.kind = kind
        self._committed_id = 0

    def ensure_schema(self):
        """
        Create the table if it doesn't exist. Existing data is never
        dropped or altered, so it's safe to call on every startup.
        """
        columns = "".join(f", {n} {t}" for n, t in self.kind.columns.items())
        self.conn.execute(
            f"""CREATE TABLE IF NOT EXISTS {self.kind.name}
                (id INTEGER PRIMARY KEY AUTOINCREMENT{columns}, timestamp TEXT)"""
        )
        self.conn.commit()
        self._committed_id = self._max_id()

    def insert(self, fields: Dict[str, Any]) -> int:
        """
        Append a row. The row is pending until :meth:`commit`.

        Args:
            fields: Column values, missing columns are stored as ``NULL``

        Returns:
            id of the new row

        Raises:
            :class:`ValueError` for unknown columns,
            :class:`web3sync.errors.StoreWriteError` if the write fails
        """
        unknown = set(fields.keys()) - set(self.kind.columns.keys())
        if len(unknown) > 0:
            raise ValueError(
                f"Unknown columns for `{self.kind.name}`: {', '.join(sorted(unknown))}"
            )
        columns = list(self.kind.columns.keys())
        values = [fields.get(c) for c in columns] + [utc_now_iso()]
        placeholders = ",".join("?" * len(values))
        try:
            cursor = self.conn.execute(
                f"INSERT INTO {self.kind.name} ({', '.join(columns + ['timestamp'])}) VALUES ({placeholders})",
                values,
            )
        except (SqliteError, OverflowError) as e:
            raise StoreWriteError(f"Insert into `{self.kind.name}` failed: {e}") from e
        return cursor.lastrowid

    def exists(self, **fields) -> bool:
        """
        Check if a row with the given column values exists,
        pending rows included. Used by handlers for duplicate checks.
        """
        if len(fields) == 0:
            return self.count(committed=False) > 0
        for k in fields.keys():
            if not k in self.kind.columns:
                raise ValueError(f"Unknown column for `{self.kind.name}`: {k}")
        where = " AND ".join(f"{k} IS ?" for k in fields.keys())
        row = self.conn.execute(
            f"SELECT 1 FROM {self.kind.name} WHERE {where} LIMIT 1",
            tuple(fields.values()),
        ).fetchone()
        return row is not None

    def query_all(self) -> List[Record]:
        """
        All committed records, ordered by id ascending.
        """
        columns = ", ".join(["id", *self.kind.columns.keys(), "timestamp"])
        rows = self.conn.execute(
            f"SELECT {columns} FROM {self.kind.name} WHERE id <= ? ORDER BY id",
            (self._committed_id,),
        ).fetchall()
        return [Record.from_row(self.kind, r) for r in rows]

    def count(self, committed: bool = True) -> int:
        """
        Number of records

        Args:
            committed: count committed records only
        """
        limit = self._committed_id if committed else 2**63 - 1
        row = self.conn.execute(
            f"SELECT COUNT(*) FROM {self.kind.name} WHERE id <= ?", (limit,)
        ).fetchone()
        return row[0]

    def commit(self):
        super().commit()
        self._committed_id = self._max_id()

    def _max_id(self) -> int:
        row = self.conn.execute(f"SELECT MAX(id) FROM {self.kind.name}").fetchone()
        return row[0] or 0
