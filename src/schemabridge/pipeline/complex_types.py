"""
Recovery of array, set and row structure from the Vertica catalog.

Result set metadata only says a column is an ARRAY or STRUCT. The element
type lives in the system tables:

- columns        column -> Vertica type id
- types          primitive type id -> SQL type code and name
- complex_types  complex type id -> child field id and field type name

1-D arrays and sets of primitives are recognised from their type id alone;
anything else is resolved by following complex_types links.
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Set

from schemabridge.adapters.query_client import QueryClient, query_and_next
from schemabridge.canonical.column_def import ColumnDef, ColumnMetadata
from schemabridge.canonical.table_source import ColumnInfoQuery
from schemabridge.standards.sql_types import SqlType
from schemabridge.standards.vertica_catalog import (
    COMPLEX_TYPE_NAME_PREFIX,
    DECIMAL_MAX_PRECISION,
    ELEMENT_LABEL,
    NATIVE_ARRAY_BASE_ID,
    PRIMITIVES_MAX_ID,
    SET_BASE_ID,
    column_type_query,
    complex_type_query,
    primitive_type_query,
)
from schemabridge.utils.exceptions import (
    CatalogColumnNotFound,
    ComplexTypeCycleError,
    MissingSqlConversionError,
    VerticaComplexTypeNotFound,
    VerticaNativeTypeNotFound,
)


class TypeIdKind(Enum):
    ARRAY = "ARRAY"
    SET = "SET"
    COMPLEX = "COMPLEX"


@dataclass(frozen=True)
class TypeIdClass:
    kind: TypeIdKind
    element_id: Optional[int] = None

    @property
    def is_flat(self) -> bool:
        return self.kind is not TypeIdKind.COMPLEX

    @property
    def is_set(self) -> bool:
        return self.kind is TypeIdKind.SET


def classify_type_id(type_id: int) -> TypeIdClass:
    """
    Classify a Vertica type id by interval.

    [1500, 2700) is an array of primitive id - 1500,
    [2700, 3900) is a set of primitive id - 2700,
    anything else needs a complex_types walk.
    """
    if NATIVE_ARRAY_BASE_ID <= type_id < NATIVE_ARRAY_BASE_ID + PRIMITIVES_MAX_ID:
        return TypeIdClass(TypeIdKind.ARRAY, type_id - NATIVE_ARRAY_BASE_ID)

    if SET_BASE_ID <= type_id < SET_BASE_ID + PRIMITIVES_MAX_ID:
        return TypeIdClass(TypeIdKind.SET, type_id - SET_BASE_ID)

    return TypeIdClass(TypeIdKind.COMPLEX)


def element_def(sql_type: int, type_name: str, depth: int) -> ColumnDef:
    return ColumnDef(
        label=ELEMENT_LABEL,
        sql_type=sql_type,
        type_name=type_name,
        size=DECIMAL_MAX_PRECISION,
        scale=0,
        signed=True,
        nullable=True,
        metadata=ColumnMetadata(name=ELEMENT_LABEL, depth=depth),
    )


class ComplexTypeResolver:
    """
    Fills complex column definitions in from the Vertica catalog.

    Catalog probes are single-row lookups and are never retried; a missing
    row fails only the column being resolved.
    """

    def __init__(self, client: QueryClient):
        self.client = client

    def resolve(self, col: ColumnDef, info: ColumnInfoQuery) -> ColumnDef:
        # Row fields are not resolved; the column stays an opaque struct.
        if col.sql_type == SqlType.STRUCT:
            return col

        if col.sql_type != SqlType.ARRAY:
            raise MissingSqlConversionError(col.sql_type, col.type_name)

        def on_row(row) -> ColumnDef:
            # data_type_id is Vertica's internal id, not a SQL type code
            return self.make_array_column_def(col, int(row["data_type_id"]))

        def on_no_row(_query: str) -> ColumnDef:
            raise CatalogColumnNotFound(info.table_name, col.label)

        sql = column_type_query(info.table_name, info.db_schema, col.label)
        return query_and_next(self.client, sql, on_row, on_no_row)

    def make_array_column_def(self, array_def: ColumnDef, type_id: int) -> ColumnDef:
        type_class = classify_type_id(type_id)

        if type_class.is_flat:
            element = self.primitive_def(type_class.element_id, depth=0)
        else:
            element = self.nested_element_def(type_id)

        metadata = ColumnMetadata(
            name=array_def.label,
            is_set=type_class.is_set,
            depth=element.metadata.depth,
        )
        return dataclasses.replace(array_def, children=(element,), metadata=metadata)

    def nested_element_def(self, type_id: int) -> ColumnDef:
        """
        Follow complex_types from a nested array down to its primitive element.

        Each hop through a `_ct_` field adds one level of depth.
        """
        current_id = type_id
        depth = 0
        seen: Set[int] = set()

        while True:
            if current_id in seen:
                raise ComplexTypeCycleError(type_id)
            seen.add(current_id)

            row = query_and_next(
                self.client,
                complex_type_query(current_id),
                lambda r: r,
                self._complex_type_not_found(current_id),
            )
            field_type_name = row["field_type_name"]
            child_id = int(row["field_id"])

            if not field_type_name.startswith(COMPLEX_TYPE_NAME_PREFIX):
                return self.primitive_def(child_id, depth)

            current_id = child_id
            depth += 1

    @staticmethod
    def _complex_type_not_found(type_id: int):
        def on_no_row(_query: str):
            raise VerticaComplexTypeNotFound(type_id)
        return on_no_row

    def primitive_def(self, type_id: int, depth: int) -> ColumnDef:
        def on_row(row) -> ColumnDef:
            return element_def(int(row["jdbc_type"]), row["type_name"], depth)

        def on_no_row(_query: str) -> ColumnDef:
            raise VerticaNativeTypeNotFound(type_id)

        return query_and_next(
            self.client, primitive_type_query(type_id), on_row, on_no_row
        )
