from hypothesis import given, settings, HealthCheck
from hypothesis.strategies import integers, text
from string import ascii_letters

from web3sync.cursors import CursorsRepo, SyncCursor


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(network=text(ascii_letters, min_size=1), block=integers(0, 2**62))
def test_read_write(network: str, block: int, cursors_repo: CursorsRepo):
    try:
        cursor = SyncCursor(network, block)
        cursors_repo.save(cursor)
        cursors_repo.commit()
        assert cursors_repo.get(network) == cursor
    finally:
        cursors_repo.conn.execute("DELETE FROM cursors")
        cursors_repo.commit()


def test_missing(cursors_repo: CursorsRepo):
    assert cursors_repo.get("devnet") is None


def test_upsert(cursors_repo: CursorsRepo):
    cursors_repo.save(SyncCursor("devnet", 1))
    cursors_repo.save(SyncCursor("devnet", 2))
    cursors_repo.save(SyncCursor("mainnet", 10))
    cursors_repo.commit()
    assert cursors_repo.get("devnet").last_processed_block == 2
    assert cursors_repo.get("mainnet").next_block == 11


def test_rollback(cursors_repo: CursorsRepo):
    cursors_repo.save(SyncCursor("devnet", 1))
    cursors_repo.commit()
    cursors_repo.save(SyncCursor("devnet", 2))
    cursors_repo.rollback()
    assert cursors_repo.get("devnet").last_processed_block == 1


def test_next_block():
    assert SyncCursor("devnet", None).next_block is None
    assert SyncCursor("devnet", 0).next_block == 1
