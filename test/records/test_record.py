import pytest

from web3sync.records import Record, RecordKind


def test_kind_validation():
    with pytest.raises(ValueError):
        RecordKind("bad name", {"a": "TEXT"})
    with pytest.raises(ValueError):
        RecordKind("t", {"a; DROP TABLE t": "TEXT"})
    with pytest.raises(ValueError):
        RecordKind("t", {"id": "INTEGER"})
    with pytest.raises(ValueError):
        RecordKind("t", {"timestamp": "TEXT"})


def test_kind_equality():
    assert RecordKind("t", {"a": "TEXT"}) == RecordKind("t", {"a": "TEXT"})
    assert RecordKind("t", {"a": "TEXT"}) != RecordKind("t", {"a": "INTEGER"})


def test_record_from_row():
    kind = RecordKind("t", {"a": "TEXT", "b": "INTEGER"})
    record = Record.from_row(kind, (3, "x", 5, "2024-01-01T00:00:00+00:00"))
    assert record.to_dict() == {
        "id": 3,
        "a": "x",
        "b": 5,
        "timestamp": "2024-01-01T00:00:00+00:00",
    }
