"""
Decoding raw logs into :class:`web3sync.events.DecodedEvent`.

Decoded values are normalized at this boundary so that handlers
work with plain python values:

+-----------------------------+--------------------------------------+
| ABI type                    | Python value                         |
+=============================+======================================+
| ``address``                 | lowercase ``0x...`` string           |
+-----------------------------+--------------------------------------+
| ``bytes``, ``bytesN``       | ``0x...`` hex string                 |
+-----------------------------+--------------------------------------+
| ``tuple(bool is_some, T     | ``T`` or ``None``                    |
| value)``                    |                                      |
+-----------------------------+--------------------------------------+
| other ``tuple``             | ``dict`` keyed by component name     |
+-----------------------------+--------------------------------------+
| ``T[]``                     | ``list``                             |
+-----------------------------+--------------------------------------+
| integers, ``bool``,         | as is                                |
| ``string``                  |                                      |
+-----------------------------+--------------------------------------+
"""

from __future__ import annotations
from typing import Any, Dict, List, Mapping, Tuple

from eth_abi.exceptions import DecodingError
from eth_utils import encode_hex
from hexbytes import HexBytes
from web3 import Web3
from web3.contract.contract import ContractEvent
from web3.exceptions import Web3Exception

from web3sync.errors import DecodeError
from web3sync.events.event import DecodedEvent
from web3sync.events.filter import EventFilter
from web3sync.utils import to_int

OPTION_COMPONENTS = ["is_some", "value"]
ZERO_HASH = "0x" + "00" * 32


class EventDecoder:
    """
    Matches raw logs against an :class:`EventFilter` and decodes them.

    Contract events are built once per filter, so a single
    instance can be shared.

    Args:
        w3: an instance of web3 providing the ABI codec. A provider is not needed.
    """

    def __init__(self, w3: Web3 | None = None):
        self._w3 = w3 or Web3()
        self._events: Dict[Tuple[str, str], ContractEvent] = {}

    def decode(
        self, raw_log: Mapping[str, Any], event_filter: EventFilter
    ) -> DecodedEvent | None:
        """
        Decode ``raw_log`` as the filter's event.

        Args:
            raw_log: A log entry as returned by ``eth_getLogs``
            event_filter: The filter to match against

        Returns:
            Decoded event or ``None`` if the log is not the filter's event

        Raises:
            :class:`web3sync.errors.DecodeError` if the log matches
            the filter address and topic but the payload can't be decoded
        """
        address = str(raw_log.get("address", "")).lower()
        if address != event_filter.contract_address:
            return None
        topics = raw_log.get("topics") or []
        if len(topics) == 0 or HexBytes(topics[0]) != event_filter.topic:
            return None

        try:
            log = _normalize_log(raw_log)
            event_abi = {"anonymous": False, **event_filter.event_abi}
            data = self._contract_event(event_filter, event_abi).process_log(log)
            parsed = {
                i["name"]: _normalize_value(i, data["args"][i["name"]])
                for i in event_abi.get("inputs", [])
            }
        except (Web3Exception, DecodingError, ValueError, TypeError, KeyError) as e:
            raise DecodeError(raw_log, event_filter.signature, str(e)) from e

        return DecodedEvent(
            block_number=log["blockNumber"],
            log_index=log["logIndex"],
            transaction_hash=encode_hex(log["transactionHash"]),
            address=address,
            event_name=event_filter.event_name,
            parsed=parsed,
        )

    def _contract_event(
        self, event_filter: EventFilter, event_abi: Dict[str, Any]
    ) -> ContractEvent:
        if not event_filter.key in self._events:
            contract = self._w3.eth.contract(abi=[event_abi])
            self._events[event_filter.key] = contract.events[event_filter.event_name]()
        return self._events[event_filter.key]


def _normalize_log(raw_log: Mapping[str, Any]) -> Dict[str, Any]:
    log = dict(raw_log)
    log["topics"] = [HexBytes(t) for t in log["topics"]]
    log["data"] = HexBytes(log.get("data") or b"")
    log["blockNumber"] = to_int(log["blockNumber"])
    log["logIndex"] = to_int(log["logIndex"])
    log["transactionIndex"] = to_int(log.get("transactionIndex", 0))
    log["transactionHash"] = HexBytes(log.get("transactionHash") or ZERO_HASH)
    log["blockHash"] = HexBytes(log.get("blockHash") or ZERO_HASH)
    return log


def _normalize_value(abi_input: Dict[str, Any], value: Any) -> Any:
    abi_type: str = abi_input["type"]
    if abi_type.endswith("]"):
        item_abi = {**abi_input, "type": abi_type[: abi_type.rindex("[")]}
        return [_normalize_value(item_abi, v) for v in value]
    if abi_type == "tuple":
        components: List[Dict[str, Any]] = abi_input.get("components", [])
        if isinstance(value, Mapping):
            values = [value[c["name"]] for c in components]
        else:
            values = list(value)
        if _is_option(components):
            is_some, inner = values
            return _normalize_value(components[1], inner) if is_some else None
        return {
            c["name"]: _normalize_value(c, v) for c, v in zip(components, values)
        }
    if abi_type == "address":
        return value.lower()
    if abi_type.startswith("bytes"):
        return encode_hex(value)
    return value


def _is_option(components: List[Dict[str, Any]]) -> bool:
    return (
        [c.get("name") for c in components] == OPTION_COMPONENTS
        and components[0]["type"] == "bool"
    )
