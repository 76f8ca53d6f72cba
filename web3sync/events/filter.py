from __future__ import annotations
from typing import Any, Awaitable, Callable, Dict, List
from functools import cached_property

from eth_utils import event_abi_to_log_topic
from hexbytes import HexBytes

from web3sync.events.event import DecodedEvent
from web3sync.utils import short_address

#: Asynchronous function receiving a :class:`DecodedEvent`
Handler = Callable[[DecodedEvent], Awaitable[None]]


class EventFilter:
    """
    Subscription of a handler to one event of one contract.

    The filter is immutable once created. The event entry is looked up
    in the contract ABI on construction, so a misspelled event name
    fails early.

    Args:
        contract_address: Address of the contract emitting the event
        abi: Contract ABI (a list of ABI entries)
        event_name: Name of the event, e.g. ``Transfer``
        handler: Async function called with every :class:`DecodedEvent`

    Raises:
        :class:`ValueError` if the ABI has no such event
    """

    def __init__(
        self,
        contract_address: str,
        abi: List[Dict[str, Any]],
        event_name: str,
        handler: Handler,
    ):
        self._contract_address = contract_address.lower()
        self._abi = abi
        self._event_name = event_name
        self._handler = handler
        self._event_abi = _find_event_abi(abi, event_name)

    @property
    def contract_address(self) -> str:
        """
        Contract address, lowercase
        """
        return self._contract_address

    @property
    def abi(self) -> List[Dict[str, Any]]:
        return self._abi

    @property
    def event_name(self) -> str:
        return self._event_name

    @property
    def handler(self) -> Handler:
        return self._handler

    @property
    def event_abi(self) -> Dict[str, Any]:
        """
        ABI entry of the event
        """
        return self._event_abi

    @property
    def key(self):
        """
        Routing key of the filter: ``(contract_address, event_name)``
        """
        return (self._contract_address, self._event_name)

    @cached_property
    def topic(self) -> HexBytes:
        """
        Log topic of the event (keccak of its signature)
        """
        return HexBytes(event_abi_to_log_topic(self._event_abi))

    @cached_property
    def signature(self) -> str:
        """
        Canonical event signature, e.g. ``Transfer(address,address,uint256)``
        """
        types = ",".join(_collapse_type(i) for i in self._event_abi.get("inputs", []))
        return f"{self._event_name}({types})"

    def __repr__(self):
        return f"EventFilter({self._event_name}@{short_address(self._contract_address)})"


def _find_event_abi(abi: List[Dict[str, Any]], event_name: str) -> Dict[str, Any]:
    for entry in abi:
        if entry.get("type") == "event" and entry.get("name") == event_name:
            return entry
    raise ValueError(f"Event `{event_name}` is not found in the contract ABI")


def _collapse_type(abi_input: Dict[str, Any]) -> str:
    # tuple[] and tuple[2] keep their array suffix
    abi_type = abi_input["type"]
    if abi_type.startswith("tuple"):
        inner = ",".join(_collapse_type(c) for c in abi_input.get("components", []))
        return f"({inner}){abi_type[len('tuple'):]}"
    return abi_type
