from typing import List, Tuple

import pyarrow as pa

from schemabridge.pipeline.datatype import arrow_primitive_to_native, is_primitive_arrow_type
from schemabridge.utils.exceptions import (
    EmptySchemaError,
    InvalidMapSchemaError,
    InvalidTableSchemaComplexType,
    SchemaBridgeError,
)
from schemabridge.utils.results import collect_all


def _is_list(data_type: pa.DataType) -> bool:
    return pa.types.is_list(data_type) or pa.types.is_large_list(data_type)


def is_native_column(arrow_field: pa.Field) -> bool:
    """
    Primitives and 1-D lists of primitives are native Vertica columns.
    """
    data_type = arrow_field.type
    if _is_list(data_type):
        return is_primitive_arrow_type(data_type.value_type)
    return is_primitive_arrow_type(data_type)


def split_complex_columns(schema: pa.Schema) -> Tuple[List[pa.Field], List[pa.Field]]:
    native_cols: List[pa.Field] = []
    complex_cols: List[pa.Field] = []
    for arrow_field in schema:
        if is_native_column(arrow_field):
            native_cols.append(arrow_field)
        else:
            complex_cols.append(arrow_field)
    return native_cols, complex_cols


class VerticaTableSchemaValidator:
    """
    Checks that an Arrow schema can back a Vertica table.

    This class:
    - NEVER mutates schema
    - Runs before any DDL is generated for writing
    """

    def __init__(self, schema: pa.Schema):
        self.schema = schema

    def validate_has_native_column(self, native_cols: List[pa.Field], complex_cols: List[pa.Field]):
        # Vertica tables need at least one column of a native type
        if native_cols:
            return
        if complex_cols:
            raise InvalidTableSchemaComplexType()
        raise EmptySchemaError()

    def validate_map_column(self, arrow_field: pa.Field):
        map_type = arrow_field.type
        try:
            arrow_primitive_to_native(map_type.key_type, 0)
            arrow_primitive_to_native(map_type.item_type, 0)
        except SchemaBridgeError as err:
            raise InvalidMapSchemaError(arrow_field.name) from err

    def validate(self) -> bool:
        native_cols, complex_cols = split_complex_columns(self.schema)
        self.validate_has_native_column(native_cols, complex_cols)

        map_cols = [c for c in complex_cols if pa.types.is_map(c.type)]
        collect_all(map_cols, self.validate_map_column)
        return True


def check_valid_table_schema(schema: pa.Schema) -> None:
    VerticaTableSchemaValidator(schema).validate()
