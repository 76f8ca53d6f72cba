"""
Module for matching and decoding contract events.

:class:`EventFilter` subscribes a handler to one event of one contract.
:class:`EventDecoder` turns raw ``eth_getLogs`` entries into
:class:`DecodedEvent` for a filter.

Example:
    ::

        from web3sync.events import EventDecoder, EventFilter

        async def on_transfer(event):
            print(event.parsed["value"])

        dai_address = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
        dai_abi = [{"anonymous":False,"inputs":[{"indexed":True,"internalType":"address","name":"from","type":"address"},{"indexed":True,"internalType":"address","name":"to","type":"address"},{"indexed":False,"internalType":"uint256","name":"value","type":"uint256"}],"name":"Transfer","type":"event"}]

        transfers = EventFilter(dai_address, dai_abi, "Transfer", on_transfer)
        event = EventDecoder().decode(raw_log, transfers)
        # => None if raw_log is not a DAI Transfer
"""

from web3sync.events.event import DecodedEvent
from web3sync.events.filter import EventFilter, Handler
from web3sync.events.decoder import EventDecoder
