import pytest

from fixtures.chain import GREETER_ABI, GREETER_ADDRESS, TOKEN_ABI, TOKEN_ADDRESS
from web3sync.errors import DuplicateFilterError
from web3sync.events import DecodedEvent, EventFilter
from web3sync.handlers import HandlerRegistry


async def first(event):
    pass


async def second(event):
    pass


def event(address: str, name: str) -> DecodedEvent:
    return DecodedEvent(1, 0, "0x00", address, name, {})


def test_duplicate_filter(registry: HandlerRegistry):
    registry.register(EventFilter(TOKEN_ADDRESS, TOKEN_ABI, "Transfer", first))
    with pytest.raises(DuplicateFilterError):
        registry.register(EventFilter(TOKEN_ADDRESS.lower(), TOKEN_ABI, "Transfer", second))
    assert len(registry) == 1
    assert registry.match(event(TOKEN_ADDRESS, "Transfer")) == [first]


def test_match(registry: HandlerRegistry):
    registry.register(EventFilter(TOKEN_ADDRESS, TOKEN_ABI, "Transfer", first))
    registry.register(EventFilter(TOKEN_ADDRESS, TOKEN_ABI, "Approval", second))
    registry.register(EventFilter(GREETER_ADDRESS, GREETER_ABI, "GreetingChanged", second))

    assert registry.match(event(TOKEN_ADDRESS, "Transfer")) == [first]
    assert registry.match(event(TOKEN_ADDRESS, "Approval")) == [second]
    assert registry.match(event(GREETER_ADDRESS, "Transfer")) == []


def test_addresses_and_filters(registry: HandlerRegistry):
    registry.register(EventFilter(TOKEN_ADDRESS, TOKEN_ABI, "Transfer", first))
    registry.register(EventFilter(GREETER_ADDRESS, GREETER_ABI, "GreetingChanged", first))
    registry.register(EventFilter(TOKEN_ADDRESS, TOKEN_ABI, "Approval", second))

    assert registry.addresses() == [TOKEN_ADDRESS.lower(), GREETER_ADDRESS.lower()]
    names = [f.event_name for f in registry.filters_for(TOKEN_ADDRESS)]
    assert names == ["Transfer", "Approval"]
    assert [f.event_name for f in registry] == ["Transfer", "GreetingChanged", "Approval"]
