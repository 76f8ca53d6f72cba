"""
Module with the block synchronization loop.

The main class of this module is :class:`SyncEngine`.
It follows the chain from a starting block, decodes logs of the
registered contracts, awaits handlers in order and persists
its progress so that restarts resume where it stopped.

Example:
    ::

        import asyncio
        from web3sync.chain import Web3ChainClient
        from web3sync.core import connection_from_path
        from web3sync.cursors import CursorsRepo
        from web3sync.handlers import HandlerRegistry
        from web3sync.sync import SyncEngine

        conn = connection_from_path("store.db")
        registry = HandlerRegistry()
        registry.register(transfers)

        engine = SyncEngine(
            Web3ChainClient("http://127.0.0.1:8545"),
            registry,
            CursorsRepo(conn=conn),
            network="devnet",
        )

        async def main():
            await engine.initialize()
            while await engine.step():
                pass  # catching up with the chain

        asyncio.run(main())
"""

from web3sync.sync.engine import SyncEngine, SyncState
