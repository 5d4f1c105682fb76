"""COPY, MERGE and export column lists."""

import logging

import pyarrow as pa
import pytest

import schemabridge.outputs.column_list as column_list
from conftest import col, desc
from schemabridge.canonical.column_def import ColumnMetadata
from schemabridge.canonical.table_source import TableName
from schemabridge.outputs.column_list import (
    copy_column_list,
    get_copy_column_list,
    get_merge_insert_values,
    get_merge_update_values,
    make_columns_string,
    merge_insert_values,
    merge_update_values,
)
from schemabridge.pipeline.vertica_schema import VerticaSchemaReader
from schemabridge.standards.sql_types import SqlType
from schemabridge.utils.exceptions import ErrorList, TableNotEnoughRowsError


@pytest.fixture
def events(monkeypatch):
    captured = []
    monkeypatch.setattr(
        column_list,
        "log_event",
        lambda event_type, payload, level=logging.INFO: captured.append((event_type, payload, level)),
    )
    return captured


def _schema(*names, nullable=True):
    return pa.schema([pa.field(n, pa.int64(), nullable=nullable) for n in names])


class TestCopyColumnList:

    def test_load_by_name_keeps_schema_order(self, events):
        target = [col("A", SqlType.BIGINT), col("B", SqlType.BIGINT), col("C", SqlType.BIGINT)]

        result = copy_column_list(_schema("b", "a"), target, "t")

        assert result == '("b","a")'
        assert events[-1][0] == "COPY_LOAD_BY_NAME"

    def test_load_by_position_when_a_name_is_missing(self, events):
        target = [col("a", SqlType.BIGINT), col("b", SqlType.BIGINT)]

        assert copy_column_list(_schema("a", "x"), target) == ""
        assert events[-1][0] == "COPY_LOAD_BY_POSITION"

    def test_more_source_columns_than_target(self, events):
        target = [col(n, SqlType.BIGINT) for n in ("a", "b", "c")]

        with pytest.raises(TableNotEnoughRowsError) as exc:
            copy_column_list(_schema("a", "b", "c", "d"), target, "t")

        assert exc.value.schema_count == 4
        assert exc.value.table_count == 3

    def test_nullability_mismatch_is_a_warning(self, events):
        target = [col("a", SqlType.BIGINT, nullable=False)]

        result = copy_column_list(_schema("a", nullable=True), target, "t")

        assert result == '("a")'
        warnings = [e for e in events if e[0] == "NULLABILITY_MISMATCH_WARNING"]
        assert len(warnings) == 1
        assert warnings[0][1]["column"] == "a"
        assert warnings[0][2] == logging.WARNING

    def test_no_warning_when_source_is_required(self, events):
        target = [col("a", SqlType.BIGINT, nullable=False)]

        copy_column_list(_schema("a", nullable=False), target, "t")

        assert all(e[0] != "NULLABILITY_MISMATCH_WARNING" for e in events)

    def test_discovers_target_columns(self, fake_client, events):
        client = fake_client(columns=[desc("ID", SqlType.BIGINT), desc("Name", SqlType.VARCHAR)])
        reader = VerticaSchemaReader(client)

        result = get_copy_column_list(reader, TableName("t", "s"), _schema("name", "id"))

        assert result == '("name","id")'
        assert client.queries == ['SELECT * FROM "s"."t" WHERE 1=0']


class TestMergeValues:

    COLUMNS = [col("a", SqlType.BIGINT), col("b", SqlType.VARCHAR)]

    def test_insert_values(self):
        assert merge_insert_values(self.COLUMNS) == 'temp."a",temp."b"'

    def test_update_values_by_name(self):
        assert merge_update_values(self.COLUMNS) == '"a"=temp."a", "b"=temp."b"'

    @pytest.mark.parametrize("explicit", ["x,y", '("x","y")', " x , y "])
    def test_update_values_with_explicit_list(self, explicit):
        assert merge_update_values(self.COLUMNS, explicit) == '"x"=temp."a", "y"=temp."b"'

    def test_values_from_catalog(self, fake_client):
        client = fake_client(columns=[desc("a", SqlType.BIGINT), desc("b", SqlType.VARCHAR)])
        reader = VerticaSchemaReader(client)

        assert get_merge_insert_values(reader, TableName("t")) == 'temp."a",temp."b"'
        assert get_merge_update_values(reader, TableName("tmp")) == '"a"=temp."a", "b"=temp."b"'

    def test_discovery_failure_carries_context(self, fake_client):
        client = fake_client(columns=[desc("arr", SqlType.ARRAY)])
        reader = VerticaSchemaReader(client)

        with pytest.raises(ErrorList) as exc:
            get_merge_insert_values(reader, TableName("t"))

        assert "Could not get merge insert values" in str(exc.value)


class TestMakeColumnsString:

    COLUMNS = [
        col("iv", SqlType.OTHER, "Interval Day to Second"),
        col("id", SqlType.OTHER, "Uuid"),
        col("tm", SqlType.TIME, "Time"),
        col(
            "st",
            SqlType.ARRAY,
            "Set[Int8]",
            metadata=ColumnMetadata(name="st", is_set=True),
            children=[col("element", SqlType.BIGINT, "Integer")],
        ),
        col("ar", SqlType.ARRAY, "Array[Int8]", children=[col("element", SqlType.BIGINT, "Integer")]),
        col("v", SqlType.VARCHAR, "Varchar"),
    ]

    def test_casts_unwritable_types(self):
        assert make_columns_string(self.COLUMNS) == (
            'iv::varchar AS "iv",'
            'id::varchar AS "id",'
            'tm::varchar AS "tm",'
            "(st::ARRAY[Integer]) as st,"
            "ar,"
            '"v"'
        )

    def test_restricted_to_required_fields(self):
        required = pa.schema([pa.field("v", pa.string()), pa.field("tm", pa.string())])
        assert make_columns_string(self.COLUMNS, required) == 'tm::varchar AS "tm","v"'

    def test_empty_required_schema_selects_everything(self):
        assert make_columns_string(self.COLUMNS, pa.schema([])).count(",") == 5
