from __future__ import annotations
import asyncio
import logging
from sqlite3 import Connection, Error as SqliteError
from typing import Any, Dict, List

from web3sync.chain import ChainClient, Web3ChainClient
from web3sync.config import IndexerConfig
from web3sync.core import Repo, connection_from_path
from web3sync.cursors import CursorsRepo
from web3sync.errors import DuplicateFilterError, InitializationError
from web3sync.events import EventFilter
from web3sync.handlers import HandlerRegistry
from web3sync.records import RecordKind, RecordsRepo
from web3sync.sync import SyncEngine

logger = logging.getLogger(__name__)


class IndexerService:
    """
    Service indexing contract events into the store.

    The service owns the :class:`web3sync.sync.SyncEngine` and its
    single background loop. Lifecycle methods never raise: they log
    the problem and return ``False``.

    **Lifecycle**

    ::

        service = IndexerService(IndexerConfig())     # builds chain client and store
        repo = service.add_record_kind(kind)          # creates the table if needed
        service.register(EventFilter(...))            # before start
        await service.start()                         # => True
        service.get_indexed_data()                    # => {"events": [...], "total": 1}
        await service.stop()                          # => True
        service.close()

    Args:
        config: Indexer settings
        chain_client: Chain client (overrides ``config.rpc``)
        conn: Store connection (overrides ``config.cache_path``)
    """

    #: Indexer settings
    config: IndexerConfig
    _engine: SyncEngine | None
    _conn: Connection | None
    _task: asyncio.Task | None
    _records: Dict[str, RecordsRepo]
    _repos: List[Repo]

    def __init__(
        self,
        config: IndexerConfig,
        chain_client: ChainClient | None = None,
        conn: Connection | None = None,
    ):
        self.config = config
        self._registry = HandlerRegistry()
        self._records = {}
        self._repos = []
        self._engine = None
        self._conn = None
        self._task = None
        self._misconfigured = False
        self._stop_status = False
        try:
            self._engine = self._create_engine(chain_client, conn)
        except InitializationError as e:
            logger.error("Failed to initialize indexer: %s", e)
            return
        self._stop_status = True
        logger.info("Indexer initialized for %s", config.network)

    @property
    def initialized(self) -> bool:
        return self._engine is not None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def add_record_kind(self, kind: RecordKind) -> RecordsRepo:
        """
        Create the table for ``kind`` if needed and return its repo.
        Handlers write through this repo, so their rows are committed
        together with the block.

        Raises:
            :class:`web3sync.errors.InitializationError` if the store isn't available,
            :class:`ValueError` if another kind with the same name is added,
            :class:`RuntimeError` if the indexer is running
        """
        if self.running:
            raise RuntimeError("Record kinds must be added before the indexer starts")
        if self._conn is None:
            raise InitializationError("Indexer store is not initialized")
        if kind.name in self._records:
            repo = self._records[kind.name]
            if repo.kind != kind:
                raise ValueError(f"Record kind `{kind.name}` is already added with other columns")
            return repo
        repo = RecordsRepo(kind, conn=self._conn)
        repo.ensure_schema()
        self._records[kind.name] = repo
        self._repos.append(repo)
        return repo

    def register(self, event_filter: EventFilter):
        """
        Register an event filter. Must be called before :meth:`start`.

        Raises:
            :class:`web3sync.errors.DuplicateFilterError` if a filter for the
            same contract and event exists. The service refuses to start after that.
        """
        if self.running:
            raise RuntimeError("Filters must be registered before the indexer starts")
        try:
            self._registry.register(event_filter)
        except DuplicateFilterError as e:
            self._misconfigured = True
            logger.error("Misconfigured indexer: %s", e)
            raise

    async def start(self) -> bool:
        """
        Start the sync loop in the background.

        Returns:
            ``True`` if the loop is running. Calling it on a running
            indexer does nothing and returns ``True``.
        """
        if self.running:
            return True
        if self._engine is None:
            logger.error("Indexer not initialized")
            return False
        if self._misconfigured:
            logger.error("Indexer has duplicate filters and can't be started")
            return False
        try:
            await self._engine.initialize()
        except Exception as e:
            logger.error("Failed to start indexer: %s", e)
            return False
        self._task = asyncio.create_task(self._engine.run())
        self._task.add_done_callback(_log_loop_exit)
        logger.info("Indexer started")
        return True

    async def stop(self) -> bool:
        """
        Stop the sync loop.

        The block in flight is finished before the loop exits. If it
        doesn't finish in ``config.stop_timeout`` seconds the loop is
        cancelled: the block is rolled back and the chain client closed.

        Returns:
            ``True`` if the loop stopped in time. Calling it on a stopped
            indexer does nothing and returns the result of the last stop.
        """
        if not self.running:
            return self._stop_status
        self._engine.request_stop()
        try:
            await asyncio.wait_for(asyncio.shield(self._task), self.config.stop_timeout)
            self._stop_status = True
            logger.info("Indexer stopped")
        except asyncio.TimeoutError:
            logger.error(
                "Indexer didn't stop in %.1fs, cancelling", self.config.stop_timeout
            )
            self._task.cancel()
            await asyncio.wait([self._task])
            self._stop_status = False
        except Exception as e:
            logger.error("Failed to stop indexer: %s", e)
            self._stop_status = False
        return self._stop_status

    def status(self) -> Dict[str, Any]:
        """
        Health of the indexer.
        """
        status = {"initialized": self.initialized, "running": self.running}
        if self._engine is not None:
            status.update(self._engine.status())
        return status

    def get_indexed_data(self, kind: str | None = None) -> Dict[str, Any]:
        """
        Committed records of a kind, ordered by id.

        Args:
            kind: Record kind name, can be omitted if there's only one kind

        Returns:
            ``{"events": [...], "total": n}``
        """
        repo = self._records_repo(kind)
        events = [r.to_dict() for r in repo.query_all()]
        return {"events": events, "total": len(events)}

    def close(self):
        """
        Close the store connection.
        """
        if self.running:
            raise RuntimeError("Stop the indexer before closing it")
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _create_engine(
        self, chain_client: ChainClient | None, conn: Connection | None
    ) -> SyncEngine:
        try:
            if conn is None:
                conn = connection_from_path(self.config.cache_path)
            if chain_client is None:
                chain_client = Web3ChainClient(self.config.rpc)
        except (SqliteError, OSError, ValueError) as e:
            raise InitializationError(str(e)) from e
        self._conn = conn
        return SyncEngine(
            chain_client,
            self._registry,
            CursorsRepo(conn=conn),
            network=self.config.network,
            starting_block=self.config.starting_block,
            repos=self._repos,
            poll_interval=self.config.poll_interval,
            retry_delay=self.config.retry_delay,
            max_retry_delay=self.config.max_retry_delay,
        )

    def _records_repo(self, kind: str | None) -> RecordsRepo:
        if kind is None:
            if len(self._records) != 1:
                raise ValueError(
                    f"Record kind must be specified, available: {', '.join(self._records)}"
                )
            return next(iter(self._records.values()))
        if not kind in self._records:
            raise ValueError(f"Unknown record kind `{kind}`")
        return self._records[kind]


def _log_loop_exit(task: asyncio.Task):
    if task.cancelled():
        return
    e = task.exception()
    if e is not None:
        logger.error("Sync loop exited with error: %s", e)
