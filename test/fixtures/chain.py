from typing import Any, Dict, List
import pytest

from eth_abi import encode
from eth_utils import encode_hex, event_abi_to_log_topic, keccak

from web3sync.chain import ChainClient
from web3sync.greetings import GREETING_CHANGED_ABI

GREETER_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
TOKEN_ADDRESS = "0x6B175474E89094C44Da98b954EedeAC495271d0F"

TRANSFER_ABI = {
    "anonymous": False,
    "name": "Transfer",
    "type": "event",
    "inputs": [
        {"indexed": True, "name": "from", "type": "address"},
        {"indexed": True, "name": "to", "type": "address"},
        {"indexed": False, "name": "value", "type": "uint256"},
    ],
}

APPROVAL_ABI = {
    "anonymous": False,
    "name": "Approval",
    "type": "event",
    "inputs": [
        {"indexed": True, "name": "owner", "type": "address"},
        {"indexed": True, "name": "spender", "type": "address"},
        {"indexed": False, "name": "value", "type": "uint256"},
    ],
}

GREETER_ABI = [
    GREETING_CHANGED_ABI,
    {
        "inputs": [{"name": "_newGreeting", "type": "string"}],
        "name": "setGreeting",
        "outputs": [],
        "stateMutability": "payable",
        "type": "function",
    },
]
TOKEN_ABI = [TRANSFER_ABI, APPROVAL_ABI]

ALICE = "0x0000000000000000000000000000000000000001"
BOB = "0x0000000000000000000000000000000000000002"


def raw_log(
    address: str,
    topics: List[bytes],
    data: bytes,
    block_number: int,
    log_index: int,
) -> Dict[str, Any]:
    """
    Log in the json rpc format (hex strings)
    """
    return {
        "address": address,
        "topics": [encode_hex(t) for t in topics],
        "data": encode_hex(data),
        "blockNumber": block_number,
        "logIndex": log_index,
        "transactionIndex": 0,
        "transactionHash": encode_hex(keccak(text=f"{block_number}:{log_index}")),
        "blockHash": encode_hex(keccak(text=str(block_number))),
        "removed": False,
    }


def greeting_log(
    block_number: int,
    log_index: int,
    setter: str = ALICE,
    greeting: str = "hi",
    premium: bool = True,
    value: int | None = 42,
    address: str = GREETER_ADDRESS,
) -> Dict[str, Any]:
    option = (value is not None, value or 0)
    return raw_log(
        address,
        [event_abi_to_log_topic(GREETING_CHANGED_ABI), encode(["address"], [setter])],
        encode(["string", "bool", "(bool,uint256)"], [greeting, premium, option]),
        block_number,
        log_index,
    )


def transfer_log(
    block_number: int,
    log_index: int,
    sender: str = ALICE,
    receiver: str = BOB,
    value: int = 10,
    address: str = TOKEN_ADDRESS,
) -> Dict[str, Any]:
    return raw_log(
        address,
        [
            event_abi_to_log_topic(TRANSFER_ABI),
            encode(["address"], [sender]),
            encode(["address"], [receiver]),
        ],
        encode(["uint256"], [value]),
        block_number,
        log_index,
    )


def approval_log(
    block_number: int, log_index: int, value: int = 10, address: str = TOKEN_ADDRESS
) -> Dict[str, Any]:
    return raw_log(
        address,
        [
            event_abi_to_log_topic(APPROVAL_ABI),
            encode(["address"], [ALICE]),
            encode(["address"], [BOB]),
        ],
        encode(["uint256"], [value]),
        block_number,
        log_index,
    )


class ChainMock(ChainClient):
    """
    In-memory chain: block number -> logs
    """

    blocks: Dict[int, List[Dict[str, Any]]]
    #: Blocks in the order logs were requested
    fetched: List[int]
    closed: bool

    def __init__(
        self, blocks: Dict[int, List[Dict[str, Any]]] | None = None, head: int | None = None
    ):
        self.blocks = blocks or {}
        self._head = head
        self.fetched = []
        self.closed = False
        self.head_error: Exception | None = None

    async def head(self) -> int:
        if not self.head_error is None:
            raise self.head_error
        if not self._head is None:
            return self._head
        return max(self.blocks.keys(), default=0)

    async def get_logs(
        self, block_number: int, addresses: List[str]
    ) -> List[Dict[str, Any]]:
        self.fetched.append(block_number)
        addresses = [a.lower() for a in addresses]
        return [
            l for l in self.blocks.get(block_number, []) if l["address"].lower() in addresses
        ]

    async def close(self):
        self.closed = True


@pytest.fixture
def chain_mock() -> ChainMock:
    """
    Empty mock chain, fill ``chain_mock.blocks`` in the test
    """
    return ChainMock()
