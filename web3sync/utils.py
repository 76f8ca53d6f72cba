"""
Utility functions.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Union
import json
from hexbytes import HexBytes
from eth_typing.encoding import HexStr
from eth_utils import encode_hex
from web3.datastructures import AttributeDict


class Web3JsonEncoder(json.JSONEncoder):
    """
    Custom encoder to parse `Web3 <https://web3py.readthedocs.io/en/stable/>`_ responses.
    By default `Web3 <https://web3py.readthedocs.io/en/stable/>`_ returns
    responses as ``AttributeDict`` with binary values.
    :class:`Web3JsonEncoder` transforms it into the :code:`0x...`
    hex format.
    """

    def default(self, o: Any) -> Union[Dict[Any, Any], HexStr]:
        """
        Convert Web3 response to ``dict``
        """
        if isinstance(o, AttributeDict):
            return {k: v for k, v in o.items()}
        if isinstance(o, (HexBytes, bytes, bytearray)):
            return HexStr(encode_hex(o))
        return json.JSONEncoder.default(self, o)


def json_response(response: Any) -> str:
    """
    Convert ``AttributeDict`` to standard json string

    Args:
        response: a `Web3 <https://web3py.readthedocs.io/en/stable/>`_ response

    Returns:
        json string
    """
    return json.dumps(response, cls=Web3JsonEncoder)


def short_address(address: str) -> str:
    """
    Converts ethereum address to short version (for display purposes only).

    Args:
        address: Ethereum address to shorten

    Returns:
        Short version of the address.

    Examples:
        ::

            print(short_address("0x6B175474E89094C44Da98b954EedeAC495271d0F"))
            # 0x6B17...1d0F

    """
    if len(address) <= 12:
        return address
    return f"{address[:6]}...{address[-4:]}"


def to_int(value: Any) -> int:
    """
    Parse an rpc number which can be either int or a hex string.
    """
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.startswith("0x"):
        return int(value, 16)
    return int(value)


def utc_now_iso() -> str:
    """
    Current UTC time in ISO-8601 format
    """
    return datetime.now(timezone.utc).isoformat()
