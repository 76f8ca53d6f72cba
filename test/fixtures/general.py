from sqlite3 import Connection
import pytest

from web3sync.config import IndexerConfig
from web3sync.core import connection_from_path

RPC = "http://127.0.0.1:8545"


def fast_config(**kwargs) -> IndexerConfig:
    """
    Config with short poll and retry intervals
    """
    settings = {
        "rpc": RPC,
        "cache_path": ":memory:",
        "network": "devnet",
        "starting_block": 0,
        "poll_interval": 0.01,
        "retry_delay": 0.01,
        "max_retry_delay": 0.05,
        "stop_timeout": 2.0,
    }
    settings.update(kwargs)
    return IndexerConfig(**settings)


@pytest.fixture
def cache_path(tmp_path) -> str:
    """
    Temp path for the store database
    """
    return str(tmp_path / "test.db")


@pytest.fixture
def conn() -> Connection:
    """
    Instance of sqlite3.Connection to a fresh in-memory store
    """
    conn = connection_from_path(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def config() -> IndexerConfig:
    return fast_config()
