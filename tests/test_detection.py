"""Vertica 10 reports complex columns as strings; detection finds them in the catalog."""

import pyarrow as pa
import pytest

from conftest import INTEGER_ID, VARCHAR_ID, desc
from schemabridge.canonical.table_source import TableName, TableQuery
from schemabridge.pipeline.detection import (
    StringDisguisedDetection,
    TypeCodeDetection,
    detection_for_server_version,
)
from schemabridge.pipeline.vertica_schema import VerticaSchemaReader
from schemabridge.standards.sql_types import SqlType
from schemabridge.utils.exceptions import CatalogColumnNotFound, ErrorList

ROW_TYPE_ID = 45035996273705100


@pytest.fixture
def disguised_client(fake_client):
    return fake_client(
        columns=[
            desc("arr", SqlType.VARCHAR, "Varchar"),
            desc("row", SqlType.VARCHAR, "Varchar"),
            desc("plain", SqlType.VARCHAR, "Varchar"),
            desc("n", SqlType.BIGINT, "Integer"),
        ],
        column_type_ids={
            ("t", "arr"): 1500 + INTEGER_ID,
            ("t", "row"): ROW_TYPE_ID,
            ("t", "plain"): VARCHAR_ID,
        },
        complex_types={ROW_TYPE_ID: ("Integer", INTEGER_ID)},
    )


class TestStringDisguisedDetection:

    def test_relabels_disguised_columns(self, disguised_client):
        reader = VerticaSchemaReader(disguised_client, StringDisguisedDetection())

        columns = {c.label: c for c in reader.get_column_info(TableName("t"))}

        assert columns["arr"].sql_type == SqlType.ARRAY
        assert columns["arr"].element.sql_type == SqlType.VARCHAR
        assert columns["arr"].element.type_name == "STRING"
        assert columns["row"].sql_type == SqlType.STRUCT
        assert columns["plain"].sql_type == SqlType.VARCHAR
        assert columns["plain"].children == ()
        assert columns["n"].sql_type == SqlType.BIGINT
        assert disguised_client.all_closed

    def test_only_string_columns_are_probed(self, disguised_client):
        reader = VerticaSchemaReader(disguised_client, StringDisguisedDetection())

        reader.get_column_info(TableName("t"))

        assert disguised_client.queries_matching("column_name='n'") == []
        assert len(disguised_client.queries_matching("FROM columns")) == 3

    def test_disguised_array_reads_as_string_list(self, disguised_client):
        reader = VerticaSchemaReader(disguised_client, StringDisguisedDetection())

        schema = reader.read_schema(TableName("t"))

        assert schema.field("arr").type == pa.list_(pa.string())
        assert schema.field("row").type == pa.struct([])

    def test_query_sources_are_not_probed(self, fake_client):
        client = fake_client(columns=[desc("v", SqlType.VARCHAR, "Varchar")])
        reader = VerticaSchemaReader(client, StringDisguisedDetection())

        columns = reader.get_column_info(TableQuery("SELECT 'a' AS v"))

        assert columns[0].sql_type == SqlType.VARCHAR
        assert len(client.queries) == 1

    def test_missing_catalog_row(self, fake_client):
        client = fake_client(columns=[desc("gone", SqlType.VARCHAR, "Varchar")])
        reader = VerticaSchemaReader(client, StringDisguisedDetection())

        with pytest.raises(ErrorList) as exc:
            reader.get_column_info(TableName("t"))

        assert isinstance(exc.value.errors[0], CatalogColumnNotFound)

    def test_default_detection_never_probes(self, disguised_client):
        reader = VerticaSchemaReader(disguised_client)

        columns = reader.get_column_info(TableName("t"))

        assert all(c.sql_type != SqlType.ARRAY for c in columns)
        assert len(disguised_client.queries) == 1


class TestDetectionForServerVersion:

    @pytest.mark.parametrize("version", [
        "10.1.1-0",
        "v10.0.0",
        "Vertica Analytic Database v10.1.1-0",
        "9.3.1-5",
    ])
    def test_old_servers_use_string_disguised(self, version):
        assert isinstance(detection_for_server_version(version), StringDisguisedDetection)

    @pytest.mark.parametrize("version", [
        "11.0.0-0",
        "Vertica Analytic Database v12.0.4-0",
        "",
        "unknown",
    ])
    def test_current_servers_use_type_codes(self, version):
        detection = detection_for_server_version(version)
        assert type(detection) is TypeCodeDetection
