import dataclasses
import re

import pyarrow as pa

from schemabridge.adapters.query_client import QueryClient, query_and_next
from schemabridge.canonical.column_def import ColumnDef
from schemabridge.canonical.table_source import ColumnInfoQuery
from schemabridge.pipeline.complex_types import classify_type_id, element_def
from schemabridge.pipeline.datatype import native_to_arrow
from schemabridge.standards.sql_types import SqlType
from schemabridge.standards.vertica_catalog import (
    column_type_id_query,
    complex_type_exists_query,
)
from schemabridge.utils.exceptions import CatalogColumnNotFound, MissingSqlConversionError


class TypeCodeDetection:
    """
    Complex types are reported honestly with ARRAY / STRUCT type codes,
    so no extra probing is needed after the usual resolution.
    """

    name = "type_code"

    def detect(self, col: ColumnDef, info: ColumnInfoQuery, client: QueryClient) -> ColumnDef:
        return col


class StringDisguisedDetection(TypeCodeDetection):
    """
    Vertica 10 reports complex columns as VARCHAR. Every string column is
    looked up in the catalog to find out whether it really is one.

    The ColumnDef produced for a disguised array is not exact: its element
    is a placeholder string. It only marks the column as complex.
    """

    name = "string_disguised"

    def detect(self, col: ColumnDef, info: ColumnInfoQuery, client: QueryClient) -> ColumnDef:
        try:
            arrow_type = native_to_arrow(col.sql_type, 0, 0, False, "")
        except MissingSqlConversionError:
            return col

        # Query sources have no catalog entry to look up
        if not pa.types.is_string(arrow_type) or not info.table_name:
            return col

        def on_row(row) -> ColumnDef:
            return self._relabel(col, int(row["data_type_id"]), client)

        def on_no_row(_query: str) -> ColumnDef:
            raise CatalogColumnNotFound(info.table_name, col.label)

        sql = column_type_id_query(info.table_name, info.db_schema, col.label)
        return query_and_next(client, sql, on_row, on_no_row)

    def _relabel(self, col: ColumnDef, type_id: int, client: QueryClient) -> ColumnDef:
        if classify_type_id(type_id).is_flat:
            placeholder = element_def(SqlType.VARCHAR, "STRING", 0)
            return dataclasses.replace(
                col, sql_type=SqlType.ARRAY, children=(placeholder,)
            )

        # Any complex type found is reported as a struct
        return query_and_next(
            client,
            complex_type_exists_query(type_id),
            lambda _row: dataclasses.replace(col, sql_type=SqlType.STRUCT),
            lambda _query: col,
        )


_VERSION_PATTERN = re.compile(r"^\s*v?(\d+)")


def detection_for_server_version(version: str) -> TypeCodeDetection:
    """
    Pick the detection strategy for a Vertica server version string,
    e.g. `10.1.1-0` or `Vertica Analytic Database v11.0.0-0`.
    """
    match = _VERSION_PATTERN.match(version or "")
    if not match:
        match = re.search(r"v(\d+)\.", version or "")
    if match and int(match.group(1)) < 11:
        return StringDisguisedDetection()
    return TypeCodeDetection()
