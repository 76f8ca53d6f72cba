from __future__ import annotations
from sqlite3 import Error as SqliteError

from web3sync.core import CURSORS_SCHEMA, Repo
from web3sync.cursors.cursor import SyncCursor
from web3sync.errors import StoreWriteError


class CursorsRepo(Repo):
    """
    Reading and writing :class:`SyncCursor` to database.
    """

    def ensure_schema(self):
        """
        Create the cursors table if it doesn't exist.
        """
        self.conn.execute(CURSORS_SCHEMA)
        self.conn.commit()

    def get(self, network: str) -> SyncCursor | None:
        """
        Get the cursor for a network.

        Args:
            network: Network identifier

        Returns:
            The cursor, ``None`` if the network was never synced
        """
        row = self.conn.execute(
            "SELECT network, last_processed_block, updated_at FROM cursors WHERE network = ?",
            (network,),
        ).fetchone()
        if not row:
            return None
        return SyncCursor.from_row(row)

    def save(self, cursor: SyncCursor):
        """
        Save the cursor. The change is pending until :meth:`commit`.

        Args:
            cursor: Cursor to save

        Raises:
            :class:`web3sync.errors.StoreWriteError` if the write fails
        """
        try:
            self.conn.execute(
                """INSERT INTO cursors VALUES(?,?,?) ON CONFLICT(network)
                DO UPDATE SET last_processed_block = excluded.last_processed_block,
                updated_at = excluded.updated_at""",
                cursor.to_row(),
            )
        except SqliteError as e:
            raise StoreWriteError(f"Saving cursor for `{cursor.network}` failed: {e}") from e
