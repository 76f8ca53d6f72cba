"""
Web3sync follows a blockchain node block by block, decodes
contract events and hands them to async handlers that persist
derived rows into sqlite. Progress is saved with every block,
so the indexer resumes where it stopped.

+--------------------------------------------+-------------------------------+
| Class                                      | Description                   |
+============================================+===============================+
| :class:`web3sync.service.IndexerService`   | Lifecycle and read API        |
+--------------------------------------------+-------------------------------+
| :class:`web3sync.sync.SyncEngine`          | Block synchronization loop    |
+--------------------------------------------+-------------------------------+
| :class:`web3sync.handlers.HandlerRegistry` | Routing events to handlers    |
+--------------------------------------------+-------------------------------+
| :class:`web3sync.events.EventDecoder`      | Decoding raw logs             |
+--------------------------------------------+-------------------------------+
| :class:`web3sync.records.RecordsRepo`      | Append-only records tables    |
+--------------------------------------------+-------------------------------+

Example:
    ::

        import asyncio
        from web3sync import IndexerConfig, IndexerService, EventFilter, RecordKind

        transfers = RecordKind("transfer", {"sender": "TEXT", "value": "INTEGER"})

        async def main():
            service = IndexerService(IndexerConfig(rpc="http://127.0.0.1:8545", cache_path="indexer.db"))
            repo = service.add_record_kind(transfers)

            async def on_transfer(event):
                repo.insert({"sender": event.parsed["from"], "value": event.parsed["value"]})

            service.register(EventFilter(dai_address, dai_abi, "Transfer", on_transfer))
            await service.start()
            ...
            await service.stop()
            print(service.get_indexed_data())

        asyncio.run(main())
"""

from web3sync.config import IndexerConfig
from web3sync.events import DecodedEvent, EventDecoder, EventFilter
from web3sync.records import Record, RecordKind, RecordsRepo
from web3sync.service import IndexerService
