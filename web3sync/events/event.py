from __future__ import annotations
from typing import Any, Dict
import json


class DecodedEvent:
    """
    DecodedEvent represents a contract event log decoded against its ABI.
    """

    #: The block this event appeared in
    block_number: int
    #: The log number for this event inside the block
    log_index: int
    #: The hash of the transaction this event appeared in
    transaction_hash: str
    _address: str
    #: Event name
    event_name: str
    #: Event data, keyed by ABI input name
    parsed: Dict[str, Any]

    def __init__(
        self,
        block_number: int,
        log_index: int,
        transaction_hash: str,
        address: str,
        event_name: str,
        parsed: Dict[str, Any],
    ):
        self.block_number = block_number
        self.log_index = log_index
        self.transaction_hash = transaction_hash
        self.address = address
        self.event_name = event_name
        self.parsed = parsed

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert :class:`DecodedEvent` to dict
        """
        return {
            "blockNumber": self.block_number,
            "logIndex": self.log_index,
            "transactionHash": self.transaction_hash,
            "address": self.address,
            "event": self.event_name,
            "parsed": self.parsed,
        }

    @property
    def address(self) -> str:
        """
        The contract address this event appeared in.
        The convention is this address is always stored in lowercase.
        """
        return self._address

    @address.setter
    def address(self, val: str):
        self._address = val.lower()

    def __eq__(self, other):
        if type(other) is type(self):
            return self.__dict__ == other.__dict__
        return False

    def __repr__(self):
        return f"DecodedEvent({json.dumps(self.to_dict(), default=str)})"
