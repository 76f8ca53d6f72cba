from __future__ import annotations
import json
from typing import Any, Dict, Tuple

from web3sync.utils import utc_now_iso


class SyncCursor:
    """
    The last block whose events are fully persisted for a network.
    """

    #: Network identifier, e.g. ``mainnet`` or ``devnet``
    network: str
    #: Last fully processed block, ``None`` if nothing was processed yet
    last_processed_block: int | None
    #: ISO-8601 time of the last update
    updated_at: str

    def __init__(
        self,
        network: str,
        last_processed_block: int | None,
        updated_at: str | None = None,
    ):
        self.network = network
        self.last_processed_block = last_processed_block
        self.updated_at = updated_at or utc_now_iso()

    @staticmethod
    def from_row(row: Tuple[str, int | None, str]) -> SyncCursor:
        """
        Deserialize from database row

        Args:
            row: database row
        """
        return SyncCursor(*row)

    def to_row(self) -> Tuple[str, int | None, str]:
        """
        Serialize to database row

        Returns:
            database row
        """
        return (self.network, self.last_processed_block, self.updated_at)

    @property
    def next_block(self) -> int | None:
        """
        The first block that is not processed yet
        """
        if self.last_processed_block is None:
            return None
        return self.last_processed_block + 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "network": self.network,
            "lastProcessedBlock": self.last_processed_block,
            "updatedAt": self.updated_at,
        }

    def __eq__(self, other):
        if type(other) is type(self):
            return self.__dict__ == other.__dict__
        return False

    def __repr__(self):
        return f"SyncCursor({json.dumps(self.to_dict())})"
