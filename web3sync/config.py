"""
Configuration of :class:`web3sync.service.IndexerService`.

Every setting can be passed explicitly or taken from the environment:

+---------------------------+-------------------+--------------------------+
| Argument                  | Env variable      | Default                  |
+===========================+===================+==========================+
| ``rpc``                   | WEB3_PROVIDER_URI | required                 |
+---------------------------+-------------------+--------------------------+
| ``cache_path``            | WEB3_CACHE_PATH   | required                 |
+---------------------------+-------------------+--------------------------+
| ``network``               | WEB3_NETWORK      | ``devnet``               |
+---------------------------+-------------------+--------------------------+
| ``starting_block``        | STARTING_BLOCK_   | ``0``                    |
|                           | NUMBER            |                          |
+---------------------------+-------------------+--------------------------+
"""

from __future__ import annotations
import os
from typing import Literal, Union

LATEST = "latest"
DEFAULT_NETWORK = "devnet"
DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_RETRY_DELAY = 1.0
DEFAULT_MAX_RETRY_DELAY = 60.0
DEFAULT_STOP_TIMEOUT = 10.0

#: Block number or ``"latest"`` for the chain head
StartingBlock = Union[int, Literal["latest"]]


class IndexerConfig:
    """
    Settings consumed by the indexer at construction.

    Args:
        rpc: An http Ethereum RPC endpoint uri
        cache_path: OS path to the store database
        network: Network identifier, the sync cursor is kept per network
        starting_block: First block to sync if there's no saved cursor.
                        ``"latest"`` starts from the chain head and ignores history.
        poll_interval: Seconds between polls for a new block
        retry_delay: Initial delay in seconds before a failed block is retried.
                     Doubles with every failure up to ``max_retry_delay``.
        max_retry_delay: Upper bound for the retry delay
        stop_timeout: Seconds to wait for the sync loop on stop
    """

    rpc: str
    cache_path: str
    network: str
    starting_block: StartingBlock

    def __init__(
        self,
        rpc: str | None = None,
        cache_path: str | None = None,
        network: str | None = None,
        starting_block: int | str | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        max_retry_delay: float = DEFAULT_MAX_RETRY_DELAY,
        stop_timeout: float = DEFAULT_STOP_TIMEOUT,
    ):
        if rpc is None:
            rpc = os.environ.get("WEB3_PROVIDER_URI")
        if rpc is None:
            raise ValueError(
                "Ethereum RPC is not set. "
                "Use `WEB3_PROVIDER_URI` env variable or pass rpc explicitly"
            )
        if cache_path is None:
            cache_path = os.environ.get("WEB3_CACHE_PATH")
        if cache_path is None:
            raise ValueError(
                "Store database path is not set. "
                "Use `WEB3_CACHE_PATH` env variable or pass cache_path explicitly"
            )
        if starting_block is None:
            starting_block = os.environ.get("STARTING_BLOCK_NUMBER", 0)

        self.rpc = rpc
        self.cache_path = cache_path
        self.network = network or os.environ.get("WEB3_NETWORK") or DEFAULT_NETWORK
        self.starting_block = parse_starting_block(starting_block)
        self.poll_interval = poll_interval
        self.retry_delay = retry_delay
        self.max_retry_delay = max_retry_delay
        self.stop_timeout = stop_timeout

    def __repr__(self):
        return (
            f"IndexerConfig(rpc={self.rpc}, cache_path={self.cache_path}, "
            f"network={self.network}, starting_block={self.starting_block})"
        )


def parse_starting_block(value: int | str) -> StartingBlock:
    """
    Parse a starting block setting.

    Args:
        value: block number, its string form, or ``"latest"``

    Returns:
        Non-negative block number or ``"latest"``

    Raises:
        :class:`ValueError` for anything else
    """
    if isinstance(value, str):
        if value.strip().lower() == LATEST:
            return LATEST
        try:
            value = int(value.strip())
        except ValueError:
            raise ValueError(
                f"Starting block must be a block number or `latest`, got `{value}`"
            ) from None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"Starting block must be a non-negative integer, got `{value}`")
    return value
