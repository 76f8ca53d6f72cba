"""
Module for routing decoded events to handlers.

Example:
    ::

        from web3sync.handlers import HandlerRegistry

        registry = HandlerRegistry()
        registry.register(transfers)
        registry.register(transfers)
        # => DuplicateFilterError
"""

from web3sync.handlers.registry import HandlerRegistry
