"""
Module for persisting sync progress.

:class:`SyncCursor` is the last block whose events are fully persisted.
It's saved in the same transaction as the block's records, so
a restart resumes right after the last committed block.
"""

from web3sync.cursors.cursor import SyncCursor
from web3sync.cursors.repo import CursorsRepo
