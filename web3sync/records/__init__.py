"""
Module for persisting rows derived from events.

Each :class:`RecordKind` is an append-only sqlite table with
an auto-increment ``id``, domain columns and an insertion ``timestamp``.

Example:
    ::

        from web3sync.records import RecordKind, RecordsRepo

        transfers = RecordKind("transfer", {"sender": "TEXT", "value": "INTEGER"})
        repo = RecordsRepo(transfers, cache_path="store.db")
        repo.ensure_schema()
        repo.insert({"sender": "0x1", "value": 10})
        repo.commit()
        repo.query_all()
        # => [Record({"id": 1, "sender": "0x1", "value": 10, "timestamp": "..."})]
"""

from web3sync.records.record import Record, RecordKind
from web3sync.records.repo import RecordsRepo
