import logging
from typing import Iterable, List, Optional, Union

import pyarrow as pa

from schemabridge.canonical.column_def import ColumnMetadata, field_metadata
from schemabridge.canonical.table_source import TableName
from schemabridge.observability.logger import log_event
from schemabridge.pipeline.datatype import arrow_primitive_to_native
from schemabridge.standards.vertica_catalog import LONG_LENGTH, UNKNOWN_TYPE_MARKER
from schemabridge.utils.exceptions import (
    InvalidExternalTableStatementError,
    MapDataTypeConversionError,
    SchemaBridgeError,
    SchemaConversionError,
    StructFieldsError,
    UnknownColumnTypesError,
)
from schemabridge.utils.results import first_failure

DEFAULT_STRLEN = 1024

Fields = Union[pa.Schema, Iterable[pa.Field]]


def _is_list(data_type: pa.DataType) -> bool:
    return (
        pa.types.is_list(data_type)
        or pa.types.is_large_list(data_type)
        or pa.types.is_fixed_size_list(data_type)
    )


def _matching_paren(text: str, start: int) -> int:
    depth = 0
    for idx in range(start, len(text)):
        if text[idx] == "(":
            depth += 1
        elif text[idx] == ")":
            depth -= 1
            if depth == 0:
                return idx
    return -1


def _split_top_level(text: str) -> List[str]:
    parts = []
    depth = 0
    current = []
    for ch in text:
        if ch in "([":
            depth += 1
        elif ch in ")]":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return parts


class VerticaDDLGenerator:
    """
    Generates Vertica DDL from Arrow schemas.

    Responsibilities:
    - Vertica type text for any Arrow type (primitives, ARRAY/SET, MAP, ROW)
    - Column definition lists and CREATE TABLE statements
    - Repairing INFER_EXTERNAL_TABLE_DDL output with known column types

    Unlike schema discovery, generation stops at the first column that
    cannot be converted: no partial statement is ever returned.
    """

    def __init__(self, strlen: int = DEFAULT_STRLEN, array_length: int = 0):
        self.strlen = strlen
        self.array_length = array_length

    # --------------------------------------------------
    # TYPES
    # --------------------------------------------------

    def vertica_type(
        self,
        data_type: pa.DataType,
        metadata: Optional[ColumnMetadata] = None,
    ) -> str:
        metadata = metadata or ColumnMetadata()

        if pa.types.is_map(data_type):
            return self._map_to_vertica(data_type.key_type, data_type.item_type)

        if pa.types.is_struct(data_type):
            return self._struct_to_row(data_type)

        if _is_list(data_type):
            return self._list_to_array(data_type.value_type, metadata)

        return arrow_primitive_to_native(data_type, self.strlen)

    def _map_to_vertica(self, key_type: pa.DataType, value_type: pa.DataType) -> str:
        key_error = value_error = None
        key_native = value_native = None

        try:
            key_native = arrow_primitive_to_native(key_type, self.strlen)
        except SchemaBridgeError as err:
            key_error = err

        try:
            value_native = arrow_primitive_to_native(value_type, self.strlen)
        except SchemaBridgeError as err:
            value_error = err

        if key_error is not None or value_error is not None:
            raise MapDataTypeConversionError(key_error, value_error)

        return f"MAP<{key_native}, {value_native}>"

    def _struct_to_row(self, data_type: pa.DataType) -> str:
        fields = [data_type.field(i) for i in range(data_type.num_fields)]
        try:
            field_defs = self.make_table_column_defs(fields)
        except SchemaBridgeError as err:
            raise StructFieldsError(err) from err

        # Row fields cannot carry constraints
        return "ROW" + field_defs.replace(" NOT NULL", "").strip()

    def _list_to_array(self, element_type: pa.DataType, metadata: ColumnMetadata) -> str:
        length = f",{self.array_length}" if self.array_length > 0 else ""
        keyword = "SET" if metadata.is_set else "ARRAY"

        left = f"{keyword}["
        right = f"{length}]"
        while _is_list(element_type):
            left = f"{left}{keyword}["
            right = f"{length}]{right}"
            element_type = element_type.value_type

        return f"{left}{self.vertica_type(element_type, metadata)}{right}"

    # --------------------------------------------------
    # TABLE DDL
    # --------------------------------------------------

    def _render_column(self, arrow_field: pa.Field) -> str:
        try:
            col_type = self.vertica_type(arrow_field.type, field_metadata(arrow_field))
        except SchemaBridgeError as err:
            raise SchemaConversionError(err).with_context(
                "Schema error when trying to create table"
            ) from err

        not_null = "NOT NULL" if not arrow_field.nullable else ""
        return f'"{arrow_field.name}" {col_type} {not_null}'.strip()

    def make_table_column_defs(self, schema: Fields) -> str:
        """
        Column definitions for a CREATE TABLE, e.g. `("id" BIGINT NOT NULL, "name" VARCHAR(1024))`.
        """
        column_sql = first_failure(list(schema), self._render_column)
        return "(" + ", ".join(column_sql) + ")"

    def generate_table_ddl(
        self,
        table: TableName,
        schema: Fields,
        if_not_exists: bool = True,
    ) -> str:
        ine = "IF NOT EXISTS " if if_not_exists else ""
        columns_block = self.make_table_column_defs(schema)
        ddl = (
            f"CREATE TABLE {ine}{table.full_name} "
            f"{columns_block} INCLUDE SCHEMA PRIVILEGES"
        )
        log_event("TABLE_DDL_GENERATED", {
            "table": table.full_name,
            "ddl": ddl,
        }, level=logging.DEBUG)
        return ddl

    # --------------------------------------------------
    # EXTERNAL TABLE DDL
    # --------------------------------------------------

    def _external_column_type(self, arrow_field: pa.Field) -> str:
        metadata = field_metadata(arrow_field)
        max_length = metadata.max_length
        data_type = arrow_field.type

        # Declared lengths are applied as-is, not through the type mapping
        if max_length is not None and (
            pa.types.is_string(data_type) or pa.types.is_large_string(data_type)
        ):
            if max_length > LONG_LENGTH:
                return f"long varchar({max_length})"
            return f"varchar({max_length})"

        if max_length is not None and (
            pa.types.is_binary(data_type) or pa.types.is_large_binary(data_type)
        ):
            return f"varbinary({max_length})"

        return self.vertica_type(data_type, metadata)

    def _update_external_column(self, col: str, schema: pa.Schema) -> str:
        first_quote = col.find('"')
        if first_quote < 0:
            return col
        space = col.find(" ", first_quote)
        if space < 0:
            return col
        col_name = col[first_quote:space]

        if len(schema) > 0:
            for arrow_field in schema:
                if f'"{arrow_field.name}"' == col_name:
                    return f"{col_name} {self._external_column_type(arrow_field)}"
            return col

        lowered = col.lower()
        if "varchar" in lowered:
            return f"{col_name} varchar({self.strlen})"
        if "varbinary" in lowered:
            return f"{col_name} varbinary({LONG_LENGTH})"
        return col

    def infer_external_table_schema(
        self,
        create_external_table_stmt: str,
        schema: Optional[pa.Schema],
        table_name: str,
    ) -> str:
        """
        Replace inferred column types in a CREATE EXTERNAL TABLE statement.

        Columns named in `schema` get their types from it; without a schema,
        string and binary columns are given explicit lengths. The statement
        is rejected while any column is still UNKNOWN.
        """
        schema = schema if schema is not None else pa.schema([])
        stmt = create_external_table_stmt.replace(f'"{table_name}"', table_name)

        start = stmt.find("(")
        end = _matching_paren(stmt, start) if start >= 0 else -1
        if end < 0:
            raise InvalidExternalTableStatementError(create_external_table_stmt)

        columns = _split_top_level(stmt[start + 1:end])
        updated = ",".join(
            self._update_external_column(col, schema) for col in columns
        )

        if UNKNOWN_TYPE_MARKER in updated:
            raise UnknownColumnTypesError().with_context(
                f"{UNKNOWN_TYPE_MARKER} partitioned column data type."
            )

        updated_stmt = stmt[:start + 1] + updated + stmt[end:]
        log_event("EXTERNAL_TABLE_DDL_UPDATED", {"statement": updated_stmt})
        return updated_stmt
