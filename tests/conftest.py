"""Pytest configuration and fixtures for schemabridge tests."""

import re
from typing import Dict, List, Optional, Sequence, Tuple

import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from schemabridge.adapters.query_client import ColumnDescription
from schemabridge.canonical.column_def import ColumnDef, ColumnMetadata
from schemabridge.standards.sql_types import SqlType
from schemabridge.utils.exceptions import QueryError


# =============================================================================
# FAKE VERTICA CLIENT
# =============================================================================

_EMPTY_PROBE = re.compile(r"WHERE 1=0$")
_COLUMNS_QUERY = re.compile(
    r"FROM columns WHERE table_name='(?P<table>[^']*)'"
    r"(?: AND table_schema='(?P<schema>[^']*)')? AND column_name='(?P<column>[^']*)'"
)
_TYPES_QUERY = re.compile(r"FROM types WHERE type_id=(?P<id>\d+)")
_COMPLEX_QUERY = re.compile(r"FROM complex_types WHERE type_id='(?P<id>\d+)'")


class FakeResult:
    """In-memory result handle; remembers whether it was closed."""

    def __init__(self, rows=(), columns=(), columns_error: Optional[Exception] = None):
        self._rows = list(rows)
        self._columns = list(columns)
        self._columns_error = columns_error
        self.closed = False

    @property
    def columns(self):
        if self._columns_error is not None:
            raise self._columns_error
        return self._columns

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def close(self):
        self.closed = True


class FakeVerticaClient:
    """
    Answers the empty-result probe and the columns / types / complex_types
    catalog lookups from dictionaries.
    """

    def __init__(
        self,
        columns: Sequence[ColumnDescription] = (),
        column_type_ids: Optional[Dict[Tuple[str, str], int]] = None,
        types: Optional[Dict[int, Tuple[int, str]]] = None,
        complex_types: Optional[Dict[int, Tuple[str, int]]] = None,
        probe_error: Optional[Exception] = None,
        columns_error: Optional[Exception] = None,
    ):
        self.columns = list(columns)
        self.column_type_ids = column_type_ids or {}
        self.types = types or {}
        self.complex_types = complex_types or {}
        self.probe_error = probe_error
        self.columns_error = columns_error
        self.queries: List[str] = []
        self.handles: List[FakeResult] = []

    def _handle(self, **kwargs) -> FakeResult:
        rs = FakeResult(**kwargs)
        self.handles.append(rs)
        return rs

    def query(self, sql: str) -> FakeResult:
        self.queries.append(sql)

        if _EMPTY_PROBE.search(sql):
            if self.probe_error is not None:
                raise self.probe_error
            return self._handle(columns=self.columns, columns_error=self.columns_error)

        match = _COLUMNS_QUERY.search(sql)
        if match:
            key = (match.group("table"), match.group("column"))
            if key not in self.column_type_ids:
                return self._handle()
            type_id = self.column_type_ids[key]
            return self._handle(rows=[{"data_type_id": type_id, "data_type": "complex"}])

        match = _TYPES_QUERY.search(sql)
        if match:
            type_id = int(match.group("id"))
            if type_id not in self.types:
                return self._handle()
            jdbc_type, type_name = self.types[type_id]
            return self._handle(rows=[{
                "type_id": type_id,
                "jdbc_type": int(jdbc_type),
                "type_name": type_name,
            }])

        match = _COMPLEX_QUERY.search(sql)
        if match:
            type_id = int(match.group("id"))
            if type_id not in self.complex_types:
                return self._handle()
            field_type_name, field_id = self.complex_types[type_id]
            return self._handle(rows=[{
                "field_type_name": field_type_name,
                "type_id": type_id,
                "field_id": field_id,
                "numeric_scale": 0,
            }])

        raise QueryError(f"Unexpected query: {sql}")

    def queries_matching(self, fragment: str) -> List[str]:
        return [q for q in self.queries if fragment in q]

    @property
    def all_closed(self) -> bool:
        return all(rs.closed for rs in self.handles)


# Vertica type ids of a few primitives
INTEGER_ID = 6
FLOAT_ID = 7
VARCHAR_ID = 9

VERTICA_TYPES = {
    INTEGER_ID: (SqlType.BIGINT, "Integer"),
    FLOAT_ID: (SqlType.DOUBLE, "Float"),
    VARCHAR_ID: (SqlType.VARCHAR, "Varchar"),
}


def desc(label: str, type_code: int, type_name: str = "", **kwargs) -> ColumnDescription:
    return ColumnDescription(label=label, type_code=int(type_code), type_name=type_name, **kwargs)


def col(
    label: str,
    sql_type: int,
    type_name: str = "",
    nullable: bool = True,
    metadata: Optional[ColumnMetadata] = None,
    children=(),
) -> ColumnDef:
    return ColumnDef(
        label=label,
        sql_type=int(sql_type),
        type_name=type_name,
        size=0,
        scale=0,
        signed=True,
        nullable=nullable,
        metadata=metadata or ColumnMetadata(name=label),
        children=tuple(children),
    )


@pytest.fixture
def fake_client():
    """Factory for fake clients preloaded with the primitive types table."""

    def _make(**kwargs) -> FakeVerticaClient:
        kwargs.setdefault("types", dict(VERTICA_TYPES))
        return FakeVerticaClient(**kwargs)

    return _make


# =============================================================================
# FILE FIXTURES
# =============================================================================

@pytest.fixture
def orders_parquet(tmp_path) -> str:
    """Parquet file with one required and one optional column."""
    schema = pa.schema([
        pa.field("id", pa.int64(), nullable=False),
        pa.field("name", pa.string()),
    ])
    table = pa.table({"id": [1, 2], "name": ["a", None]}, schema=schema)
    path = tmp_path / "orders.parquet"
    pq.write_table(table, str(path))
    return str(path)
