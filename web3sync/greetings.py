"""
Indexing of ``GreetingChanged`` events into the ``Greeting`` table.

The event is expected to have this shape::

    struct OptionalU256 { bool is_some; uint256 value; }
    event GreetingChanged(
        address indexed greeting_setter,
        string new_greeting,
        bool premium,
        OptionalU256 value
    );
"""

from __future__ import annotations

from web3sync.contracts import DeployedContracts
from web3sync.events import DecodedEvent, EventFilter, Handler
from web3sync.records import RecordKind, RecordsRepo

GREETING_CHANGED = "GreetingChanged"

GREETINGS = RecordKind(
    "Greeting",
    {
        "greeting_setter": "TEXT",
        "greeting": "TEXT",
        "premium": "INTEGER",
        "value": "INTEGER",
    },
)

GREETING_CHANGED_ABI = {
    "anonymous": False,
    "name": GREETING_CHANGED,
    "type": "event",
    "inputs": [
        {"indexed": True, "name": "greeting_setter", "type": "address"},
        {"indexed": False, "name": "new_greeting", "type": "string"},
        {"indexed": False, "name": "premium", "type": "bool"},
        {
            "indexed": False,
            "name": "value",
            "type": "tuple",
            "components": [
                {"name": "is_some", "type": "bool"},
                {"name": "value", "type": "uint256"},
            ],
        },
    ],
}


def greeting_handler(repo: RecordsRepo) -> Handler:
    """
    Handler saving every ``GreetingChanged`` as a ``Greeting`` row.

    The setter address is saved in the shortest hex form (``0x1``),
    ``premium`` as ``0``/``1`` and a missing ``value`` as ``0``.

    Args:
        repo: Repo of :data:`GREETINGS`
    """

    async def handle(event: DecodedEvent):
        value = event.parsed["value"]
        repo.insert(
            {
                "greeting_setter": hex(int(event.parsed["greeting_setter"], 16)),
                "greeting": event.parsed["new_greeting"],
                "premium": 1 if event.parsed["premium"] else 0,
                "value": 0 if value is None else value,
            }
        )

    return handle


def greeting_filter(
    contracts: DeployedContracts, repo: RecordsRepo, name: str = "YourContract"
) -> EventFilter:
    """
    Filter for ``GreetingChanged`` of a deployed contract.

    Args:
        contracts: Deployed contracts
        repo: Repo of :data:`GREETINGS`
        name: Contract name in the deployments
    """
    contract = contracts.get_contract_by_name(name)
    return EventFilter(
        contract["contract_address"],
        contract["abi"],
        GREETING_CHANGED,
        greeting_handler(repo),
    )
