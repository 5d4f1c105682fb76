"""
Column lists for COPY, MERGE and export statements.

COPY loads by name when every source column has a same-named target
column (case-insensitive), and by position otherwise. An empty column
list means load by position.
"""

import logging
from typing import Optional, Sequence

import pyarrow as pa

from schemabridge.canonical.column_def import ColumnDef
from schemabridge.canonical.table_source import TableName
from schemabridge.observability.logger import log_event
from schemabridge.pipeline.vertica_schema import VerticaSchemaReader
from schemabridge.standards.sql_types import SqlType
from schemabridge.standards.vertica_catalog import MERGE_TEMP_ALIAS
from schemabridge.utils.exceptions import SchemaBridgeError, TableNotEnoughRowsError


def _quoted(name: str) -> str:
    return f'"{name}"'


# ------------------------------------------------------------------
# COPY
# ------------------------------------------------------------------

def copy_column_list(
    schema: pa.Schema,
    target_columns: Sequence[ColumnDef],
    table_name: str = "",
) -> str:
    """
    Column list for copying data with `schema` into a table with `target_columns`.

    Returns:
        `("a","b")` in schema order when loading by name, "" when loading by position.

    Raises:
        TableNotEnoughRowsError: the schema has more columns than the table
    """
    cols_found = 0

    for column in target_columns:
        for arrow_field in schema:
            if arrow_field.name.lower() != column.label.lower():
                continue

            cols_found += 1
            # Type compatibility is checked by COPY itself; rows with NULLs
            # in a NOT NULL column are rejected at load time.
            if not column.nullable and arrow_field.nullable:
                log_event("NULLABILITY_MISMATCH_WARNING", {
                    "table": table_name,
                    "column": arrow_field.name,
                    "message": (
                        f"Column {arrow_field.name} is NOT NULL in target table "
                        f"{table_name} but nullable in the source schema. Rows with "
                        f"NULL values in column {arrow_field.name} will be rejected."
                    ),
                }, level=logging.WARNING)
            break

    if len(schema) > len(target_columns):
        raise TableNotEnoughRowsError(len(schema), len(target_columns), table_name)

    if cols_found == len(schema):
        column_list = "(" + ",".join(_quoted(f.name) for f in schema) + ")"
        log_event("COPY_LOAD_BY_NAME", {
            "table": table_name,
            "column_list": column_list,
        })
        return column_list

    log_event("COPY_LOAD_BY_POSITION", {"table": table_name})
    return ""


def get_copy_column_list(
    reader: VerticaSchemaReader,
    table_name: TableName,
    schema: pa.Schema,
) -> str:
    columns = reader.get_column_info(table_name)
    return copy_column_list(schema, columns, table_name.full_name)


# ------------------------------------------------------------------
# MERGE
# ------------------------------------------------------------------

def merge_insert_values(columns: Sequence[ColumnDef]) -> str:
    return ",".join(f"{MERGE_TEMP_ALIAS}.{_quoted(c.label)}" for c in columns)


def merge_update_values(
    temp_columns: Sequence[ColumnDef],
    copy_column_list: Optional[str] = None,
) -> str:
    """
    SET list for a MERGE update.

    An explicit column list is matched to the temp table's columns by
    position; otherwise every column updates the column of the same name.
    """
    if copy_column_list:
        custom_columns = [
            c.strip().strip('"')
            for c in copy_column_list.strip().strip("()").split(",")
        ]
        pairs = zip(custom_columns, temp_columns)
        return ", ".join(
            f"{_quoted(target)}={MERGE_TEMP_ALIAS}.{_quoted(col.label)}"
            for target, col in pairs
        )

    return ", ".join(
        f"{_quoted(col.label)}={MERGE_TEMP_ALIAS}.{_quoted(col.label)}"
        for col in temp_columns
    )


def get_merge_insert_values(reader: VerticaSchemaReader, table_name: TableName) -> str:
    try:
        columns = reader.get_column_info(table_name)
    except SchemaBridgeError as err:
        raise err.with_context(f"Could not get merge insert values for {table_name.full_name}")
    return merge_insert_values(columns)


def get_merge_update_values(
    reader: VerticaSchemaReader,
    temp_table_name: TableName,
    copy_column_list: Optional[str] = None,
) -> str:
    try:
        columns = reader.get_column_info(temp_table_name)
    except SchemaBridgeError as err:
        raise err.with_context(
            f"Could not get merge update values for {temp_table_name.full_name}"
        )
    return merge_update_values(columns, copy_column_list)


# ------------------------------------------------------------------
# Export select list
# ------------------------------------------------------------------

def _cast_to_varchar(name: str) -> str:
    return f"{name}::varchar AS {_quoted(name)}"


def _cast_to_array(col: ColumnDef) -> str:
    element = col.element
    element_type = element.type_name if element is not None else "UNKNOWN"
    return f"({col.label}::ARRAY[{element_type}]) as {col.label}"


def _select_expression(col: ColumnDef) -> str:
    if col.sql_type == SqlType.OTHER:
        if col.type_name.lower().startswith(("interval", "uuid")):
            return _cast_to_varchar(col.label)
        return _quoted(col.label)

    if col.sql_type == SqlType.TIME:
        return _cast_to_varchar(col.label)

    if col.is_array:
        # Sets are exported as arrays
        if col.metadata.is_set:
            return _cast_to_array(col)
        return col.label

    return _quoted(col.label)


def make_columns_string(
    column_defs: Sequence[ColumnDef],
    required_schema: Optional[pa.Schema] = None,
) -> str:
    """
    Select list used when exporting a table, limited to `required_schema`
    when it has fields. Types the export cannot write are cast.
    """
    if required_schema is not None and len(required_schema) > 0:
        required = set(required_schema.names)
        column_defs = [c for c in column_defs if c.label in required]

    return ",".join(_select_expression(c) for c in column_defs)
