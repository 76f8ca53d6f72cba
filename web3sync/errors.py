"""
Errors raised by the indexer.

- :class:`InitializationError`: chain client or store can't be built.
  The service never starts.
- :class:`DecodeError`: a log matched a filter but failed to decode.
  Reported, the log is skipped.
- :class:`StoreWriteError`: persistence failure. The block is aborted
  and retried.
- :class:`DuplicateFilterError`: same contract and event registered twice.
  Prevents start.
"""

from __future__ import annotations
from typing import Any, Mapping


class IndexerError(Exception):
    """
    Base class for all indexer errors.
    """


class InitializationError(IndexerError):
    """
    Chain client or store could not be constructed.
    """


class DecodeError(IndexerError):
    """
    A raw log matched a filter's address and topic
    but its payload could not be decoded against the ABI.

    Args:
        raw_log: The log that failed to decode
        signature: The expected event signature, e.g. ``Transfer(address,address,uint256)``
        reason: Underlying decoder message
    """

    #: The log that failed to decode
    raw_log: Mapping[str, Any]
    #: The expected event signature
    signature: str

    def __init__(self, raw_log: Mapping[str, Any], signature: str, reason: str = ""):
        self.raw_log = raw_log
        self.signature = signature
        message = f"Could not decode log as `{signature}`"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class StoreWriteError(IndexerError):
    """
    Underlying store I/O failure.
    """


class DuplicateFilterError(IndexerError):
    """
    A filter for the same contract address and event name is already registered.
    """

    def __init__(self, address: str, event_name: str):
        self.address = address
        self.event_name = event_name
        super().__init__(f"Filter for `{event_name}`@{address} is already registered")
