from __future__ import annotations
import asyncio
import contextlib
import logging
from enum import Enum
from typing import Any, Dict, List, Mapping

from web3sync.chain import ChainClient
from web3sync.config import (
    DEFAULT_MAX_RETRY_DELAY,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_RETRY_DELAY,
    LATEST,
    StartingBlock,
)
from web3sync.core import Repo
from web3sync.cursors import CursorsRepo, SyncCursor
from web3sync.errors import DecodeError
from web3sync.events import DecodedEvent, EventDecoder
from web3sync.handlers import HandlerRegistry
from web3sync.utils import short_address, to_int

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    SYNCING = "syncing"
    WAITING = "waiting"
    STOPPING = "stopping"


class SyncEngine:
    """
    Walks the chain block by block and dispatches events to handlers.

    **States**

    ::

        idle -> initializing -> syncing <-> waiting -> stopping -> idle

    **Block flow**

    ::

                +------------+        +-------------+ +---------+ +----------+ +-------------+
                | SyncEngine |        | ChainClient | | Decoder | | Handlers | | CursorsRepo |
                +------------+        +-------------+ +---------+ +----------+ +-------------+
                      |                      |             |           |             |
                      | Fetch block logs     |             |           |             |
                      |--------------------->|             |           |             |
                      |                      |             |           |             |
                      | Decode matching logs |             |           |             |
                      |----------------------------------->|           |             |
                      |                      |             |           |             |
                      | Await handlers in order            |           |             |
                      |----------------------------------------------->|             |
                      |                      |             |           |             |
                      | Save cursor, commit block                      |             |
                      |------------------------------------------------------------->|
                      |                      |             |           |             |

    The block's records and the cursor are committed in one transaction.
    If anything fails the transaction is rolled back and the same block is
    retried later, so handlers get every event at least once and the cursor
    never moves past a partially persisted block.

    Chain reorganizations are not detected. Records of blocks that were
    reorganized away are kept.

    Args:
        chain_client: Source of blocks and logs
        registry: Filters and their handlers
        cursors_repo: Repo for the sync cursor
        network: Network identifier the cursor is saved under
        starting_block: First block to sync when there's no saved cursor, or ``"latest"``
        repos: Other repos that share the block transaction with ``cursors_repo``.
               The list is read on every commit, so repos can be appended later.
        decoder: Event decoder
        poll_interval: Seconds between polls when the engine has caught up with the chain
        retry_delay: Initial delay before a failed block is retried
        max_retry_delay: Upper bound for the retry delay
    """

    _state: SyncState
    _next_block: int | None
    _last_processed_block: int | None
    _last_error: str | None
    _decode_errors: int
    _stop_event: asyncio.Event

    def __init__(
        self,
        chain_client: ChainClient,
        registry: HandlerRegistry,
        cursors_repo: CursorsRepo,
        network: str,
        starting_block: StartingBlock = 0,
        repos: List[Repo] | None = None,
        decoder: EventDecoder | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        max_retry_delay: float = DEFAULT_MAX_RETRY_DELAY,
    ):
        self._client = chain_client
        self._registry = registry
        self._cursors = cursors_repo
        self._network = network
        self._starting_block = starting_block
        self._repos = repos if repos is not None else []
        self._decoder = decoder or EventDecoder()
        self._poll_interval = poll_interval
        self._retry_delay = retry_delay
        self._max_retry_delay = max_retry_delay

        self._state = SyncState.IDLE
        self._next_block = None
        self._last_processed_block = None
        self._last_error = None
        self._decode_errors = 0
        self._stop_event = asyncio.Event()

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def network(self) -> str:
        return self._network

    @property
    def next_block(self) -> int | None:
        """
        The block to be processed next, ``None`` before :meth:`initialize`
        """
        return self._next_block

    @property
    def last_processed_block(self) -> int | None:
        return self._last_processed_block

    @property
    def last_error(self) -> str | None:
        """
        The error of the last failed block, ``None`` after a success
        """
        return self._last_error

    @property
    def decode_errors(self) -> int:
        """
        Number of logs skipped because they couldn't be decoded
        """
        return self._decode_errors

    async def initialize(self):
        """
        Load the saved cursor and choose the first block to process.

        The saved cursor wins over ``starting_block``, so a restart
        resumes right after the last committed block.
        """
        self._state = SyncState.INITIALIZING
        # a fresh event binds to the running loop
        self._stop_event = asyncio.Event()
        try:
            self._cursors.ensure_schema()
            cursor = self._cursors.get(self._network)
            if cursor is not None and cursor.last_processed_block is not None:
                self._last_processed_block = cursor.last_processed_block
                self._next_block = cursor.next_block
            elif self._starting_block == LATEST:
                self._next_block = await self._client.head()
            else:
                self._next_block = self._starting_block
        except BaseException:
            self._state = SyncState.IDLE
            raise
        logger.info(
            "Sync for %s starts at block %d (%d filters)",
            self._network,
            self._next_block,
            len(self._registry),
        )

    async def step(self) -> bool:
        """
        Process the next block if the chain has it.

        Returns:
            ``True`` if a block was processed, ``False`` if the engine
            has caught up with the chain head
        """
        if self._next_block is None:
            raise RuntimeError("Sync engine is not initialized")
        head = await self._client.head()
        if self._next_block > head:
            self._state = SyncState.WAITING
            return False
        self._state = SyncState.SYNCING
        number = self._next_block
        count = await self.process_block(number)
        logger.info("Processed block %d (%d events)", number, count)
        return True

    async def process_block(self, number: int) -> int:
        """
        Fetch, decode and dispatch all events of a block, then
        commit the block together with the cursor.

        Args:
            number: Block number

        Returns:
            Number of dispatched events

        Raises:
            Any error of the chain client, handlers or the store.
            The block's changes are rolled back in this case.
        """
        try:
            raw_logs = await self._client.get_logs(number, self._registry.addresses())
            events = self._decode_logs(number, raw_logs)
            for event in events:
                for handler in self._registry.match(event):
                    await handler(event)
            self._cursors.save(SyncCursor(self._network, number))
            self._commit()
        except BaseException:
            self._cursors.rollback()
            raise
        self._last_processed_block = number
        self._next_block = number + 1
        return len(events)

    async def run(self):
        """
        Sync loop. Runs until :meth:`request_stop` and
        closes the chain client on exit.

        A failed block is retried after ``retry_delay`` seconds,
        the delay doubles up to ``max_retry_delay`` while the block keeps failing.
        """
        delay = self._retry_delay
        try:
            while not self._stop_event.is_set():
                try:
                    progressed = await self.step()
                except Exception as e:
                    self._last_error = f"{type(e).__name__}: {e}"
                    logger.error(
                        "Block %s failed, retrying in %.1fs: %s",
                        self._next_block,
                        delay,
                        self._last_error,
                    )
                    await self._wait(delay)
                    delay = min(delay * 2, self._max_retry_delay)
                    continue
                self._last_error = None
                delay = self._retry_delay
                if not progressed:
                    await self._wait(self._poll_interval)
        finally:
            self._state = SyncState.STOPPING
            try:
                await self._client.close()
            finally:
                self._state = SyncState.IDLE
                logger.info("Sync for %s stopped", self._network)

    def request_stop(self):
        """
        Ask :meth:`run` to exit. The block in flight is finished first.
        """
        self._stop_event.set()

    def _decode_logs(
        self, number: int, raw_logs: List[Mapping[str, Any]]
    ) -> List[DecodedEvent]:
        events = []
        for raw_log in sorted(raw_logs, key=lambda l: to_int(l.get("logIndex", 0))):
            address = str(raw_log.get("address", ""))
            for event_filter in self._registry.filters_for(address):
                try:
                    event = self._decoder.decode(raw_log, event_filter)
                except DecodeError as e:
                    self._decode_errors += 1
                    logger.warning(
                        "Skipping log %s@%s in block %d: %s",
                        raw_log.get("logIndex"),
                        short_address(address),
                        number,
                        e,
                    )
                    break
                if event is not None:
                    events.append(event)
                    break
        return events

    def _commit(self):
        for repo in [self._cursors, *self._repos]:
            repo.commit()

    async def _wait(self, seconds: float):
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self._stop_event.wait(), seconds)

    def status(self) -> Dict[str, Any]:
        return {
            "state": self._state.value,
            "network": self._network,
            "next_block": self._next_block,
            "last_processed_block": self._last_processed_block,
            "last_error": self._last_error,
            "decode_errors": self._decode_errors,
        }
