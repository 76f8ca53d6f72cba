"""
Lookup of deployed contracts by name for the configured network.

The deployments file maps network to contract name to address and ABI:

::

    {
        "devnet": {
            "YourContract": {"address": "0x5FbD...0aa3", "abi": [...]}
        }
    }
"""

from __future__ import annotations
import json
import os
from typing import Any, Dict, List

from web3sync.config import DEFAULT_NETWORK


class DeployedContracts:
    """
    Deployed contracts of all networks.

    Args:
        contracts: Mapping ``network -> name -> {"address", "abi"}``
        network: Network to look contracts up in. Defaults to the ``WEB3_NETWORK``
                 env variable or ``devnet``.
    """

    #: Network to look contracts up in
    network: str

    def __init__(
        self, contracts: Dict[str, Dict[str, Dict[str, Any]]], network: str | None = None
    ):
        self._contracts = contracts
        self.network = network or os.environ.get("WEB3_NETWORK") or DEFAULT_NETWORK

    @staticmethod
    def from_path(path: str, network: str | None = None) -> DeployedContracts:
        """
        Load deployments from a json file.
        """
        with open(path, "r") as f:
            return DeployedContracts(json.load(f), network)

    def names(self) -> List[str]:
        """
        Names of the contracts deployed on the network
        """
        return list(self._contracts.get(self.network, {}).keys())

    def get_contract_by_name(self, name: str) -> Dict[str, Any]:
        """
        Address and ABI of a contract, ready to be used in
        :class:`web3sync.events.EventFilter`.

        Args:
            name: Contract name

        Returns:
            ``{"contract_address": ..., "abi": [...]}``

        Raises:
            :class:`KeyError` if there's no such network or contract
        """
        if not self.network in self._contracts:
            raise KeyError(f"No contracts are deployed on `{self.network}`")
        contracts = self._contracts[self.network]
        if not name in contracts:
            raise KeyError(
                f"Contract `{name}` is not deployed on `{self.network}`, "
                f"available: {', '.join(self.names()) or 'none'}"
            )
        return {
            "contract_address": contracts[name]["address"],
            "abi": contracts[name]["abi"],
        }
