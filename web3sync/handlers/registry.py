from __future__ import annotations
from typing import Dict, Iterator, List, Tuple

from web3sync.errors import DuplicateFilterError
from web3sync.events.event import DecodedEvent
from web3sync.events.filter import EventFilter, Handler


class HandlerRegistry:
    """
    Routing table from ``(contract_address, event_name)`` to handlers.

    Filters are kept in registration order, which is also
    the order handlers are called in.
    """

    _filters: List[EventFilter]
    _keys: Dict[Tuple[str, str], EventFilter]

    def __init__(self):
        self._filters = []
        self._keys = {}

    def register(self, event_filter: EventFilter):
        """
        Add a filter.

        Args:
            event_filter: Filter to add

        Raises:
            :class:`web3sync.errors.DuplicateFilterError` if the filter
            for the same contract address and event name is already registered.
            The registry is unchanged in this case.
        """
        if event_filter.key in self._keys:
            raise DuplicateFilterError(*event_filter.key)
        self._keys[event_filter.key] = event_filter
        self._filters.append(event_filter)

    def match(self, event: DecodedEvent) -> List[Handler]:
        """
        Handlers for the event, in registration order.
        """
        key = (event.address, event.event_name)
        return [f.handler for f in self._filters if f.key == key]

    def filters_for(self, address: str) -> List[EventFilter]:
        """
        Filters registered for a contract address, in registration order.
        """
        address = address.lower()
        return [f for f in self._filters if f.contract_address == address]

    def addresses(self) -> List[str]:
        """
        Unique contract addresses with at least one filter
        """
        return list(dict.fromkeys(f.contract_address for f in self._filters))

    def __iter__(self) -> Iterator[EventFilter]:
        return iter(list(self._filters))

    def __len__(self) -> int:
        return len(self._filters)
