from __future__ import annotations
from typing import Any, Dict, Tuple
import json


class RecordKind:
    """
    Schema of an append-only records table.

    Every table gets an auto-increment ``id`` primary key and
    an ISO-8601 ``timestamp`` of insertion in addition to ``columns``.

    Args:
        name: Table name
        columns: Mapping from column name to sqlite type, e.g. ``{"value": "INTEGER"}``

    Raises:
        :class:`ValueError` if names are not valid identifiers
    """

    #: Table name
    name: str
    #: Domain columns with sqlite types
    columns: Dict[str, str]

    def __init__(self, name: str, columns: Dict[str, str]):
        for n in [name, *columns.keys()]:
            if not n.isidentifier():
                raise ValueError(f"`{n}` is not a valid table or column name")
        if "id" in columns or "timestamp" in columns:
            raise ValueError("`id` and `timestamp` columns are added automatically")
        self.name = name
        self.columns = dict(columns)

    def __eq__(self, other):
        if type(other) is type(self):
            return self.__dict__ == other.__dict__
        return False

    def __repr__(self):
        return f"RecordKind({self.name}, {json.dumps(self.columns)})"


class Record:
    """
    A persisted row of a :class:`RecordKind` table.
    """

    #: Surrogate id assigned by the store
    id: int
    #: Domain fields
    fields: Dict[str, Any]
    #: ISO-8601 time of insertion
    timestamp: str

    def __init__(self, id: int, fields: Dict[str, Any], timestamp: str):
        self.id = id
        self.fields = fields
        self.timestamp = timestamp

    @staticmethod
    def from_row(kind: RecordKind, row: Tuple[Any, ...]) -> Record:
        """
        Deserialize from database row

        Args:
            kind: Schema of the table
            row: database row (``id``, columns..., ``timestamp``)
        """
        id, *values, timestamp = row
        return Record(id, dict(zip(kind.columns.keys(), values)), timestamp)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert :class:`Record` to a flat dict
        """
        return {"id": self.id, **self.fields, "timestamp": self.timestamp}

    def __eq__(self, other):
        if type(other) is type(self):
            return self.__dict__ == other.__dict__
        return False

    def __repr__(self):
        return f"Record({json.dumps(self.to_dict(), default=str)})"
