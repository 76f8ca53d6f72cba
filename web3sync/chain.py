"""
Chain clients used by :class:`web3sync.sync.SyncEngine`.

The engine needs only three things from a node: the current head,
the logs of a block and a way to release the connection.
:class:`ChainClient` is that interface, :class:`Web3ChainClient`
implements it over a `Web3 <https://web3py.readthedocs.io/en/stable/>`_ RPC.
"""

from __future__ import annotations
import json
import os
from abc import ABC, abstractmethod
from functools import cached_property
from typing import Any, Dict, List

from web3 import AsyncWeb3

from web3sync.utils import json_response


class ChainClient(ABC):
    """
    Narrow async interface to a blockchain node.
    """

    @abstractmethod
    async def head(self) -> int:
        """
        Number of the latest block
        """

    @abstractmethod
    async def get_logs(
        self, block_number: int, addresses: List[str]
    ) -> List[Dict[str, Any]]:
        """
        Raw logs of a block emitted by any of ``addresses``.

        Args:
            block_number: Block to fetch logs for
            addresses: Contract addresses

        Returns:
            Logs as plain dicts in the ``eth_getLogs`` format
        """

    async def close(self):
        """
        Release the connection. No-op by default.
        """


class Web3ChainClient(ChainClient):
    """
    :class:`ChainClient` over an Ethereum json rpc.

    Args:
        rpc: An http Ethereum RPC endpoint uri
        w3: an instance of :class:`web3.AsyncWeb3` (overrides rpc)
    """

    #: An http Ethereum RPC endpoint uri.
    #: Can be ``None`` if :class:`web3.AsyncWeb3` is injected directly.
    rpc: str | None

    def __init__(self, rpc: str | None = None, w3: AsyncWeb3 | None = None):
        self.rpc = rpc
        self._w3 = w3

    @cached_property
    def w3(self) -> AsyncWeb3:
        """
        :class:`web3.AsyncWeb3` instance for working with Ethereum RPC
        """
        if not self._w3 is None:
            return self._w3

        if self.rpc is None:
            self.rpc = os.environ.get("WEB3_PROVIDER_URI")

        if self.rpc is None:
            raise ValueError(
                "Ethereum RPC is not set. "
                "Use `WEB3_PROVIDER_URI` env variable or pass rpc explicitly"
            )

        return AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(self.rpc))

    async def head(self) -> int:
        return await self.w3.eth.block_number

    async def get_logs(
        self, block_number: int, addresses: List[str]
    ) -> List[Dict[str, Any]]:
        if len(addresses) == 0:
            return []
        entries = await self.w3.eth.get_logs(
            {
                "fromBlock": block_number,
                "toBlock": block_number,
                "address": [AsyncWeb3.to_checksum_address(a) for a in addresses],
            }
        )
        return [json.loads(json_response(e)) for e in entries]

    async def close(self):
        await self.w3.provider.disconnect()
