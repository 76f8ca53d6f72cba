import asyncio
from sqlite3 import Connection

from web3sync.events import DecodedEvent
from web3sync.greetings import GREETINGS, greeting_handler
from web3sync.records import RecordsRepo


def greeting(premium: bool, value: int | None) -> DecodedEvent:
    return DecodedEvent(
        3,
        0,
        "0x00",
        "0x5fbdb2315678afecb367f032d93f642f64180aa3",
        "GreetingChanged",
        {
            "greeting_setter": "0x00000000000000000000000000000000000000ff",
            "new_greeting": "gm",
            "premium": premium,
            "value": value,
        },
    )


def test_greeting_handler(conn: Connection):
    repo = RecordsRepo(GREETINGS, conn=conn)
    repo.ensure_schema()
    handle = greeting_handler(repo)

    async def run():
        await handle(greeting(False, None))
        await handle(greeting(True, 7))

    asyncio.run(run())
    repo.commit()
    rows = [r.fields for r in repo.query_all()]
    assert rows == [
        {"greeting_setter": "0xff", "greeting": "gm", "premium": 0, "value": 0},
        {"greeting_setter": "0xff", "greeting": "gm", "premium": 1, "value": 7},
    ]
