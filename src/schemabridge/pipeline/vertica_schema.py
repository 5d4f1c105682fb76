import logging
from typing import List, Optional

import pyarrow as pa

from schemabridge.adapters.query_client import ColumnDescription, QueryClient
from schemabridge.canonical.column_def import ColumnDef, ColumnMetadata
from schemabridge.canonical.table_source import (
    ColumnInfoQuery,
    TableSource,
    column_info_query,
)
from schemabridge.observability.logger import log_event
from schemabridge.pipeline.complex_types import ComplexTypeResolver
from schemabridge.pipeline.datatype import native_to_arrow
from schemabridge.pipeline.detection import TypeCodeDetection
from schemabridge.standards.sql_types import COMPLEX_SQL_TYPES
from schemabridge.utils.exceptions import (
    ArrayElementConversionError,
    ClientSchemaError,
    DatabaseReadError,
    MissingElementTypeError,
    MissingSqlConversionError,
    QueryError,
    SchemaBridgeError,
)
from schemabridge.utils.results import collect_all


def array_to_arrow(col: ColumnDef) -> pa.DataType:
    """
    Rebuild the Arrow list type of an array column.

    The element's depth counts the list layers found through the catalog
    walk, so the result has depth + 1 layers around the primitive.
    """
    element = col.element
    if element is None:
        raise MissingElementTypeError(col.label)

    try:
        arrow_type = native_to_arrow(
            element.sql_type,
            element.size,
            element.scale,
            element.signed,
            element.type_name,
        )
    except MissingSqlConversionError as err:
        raise ArrayElementConversionError(err.sql_type, err.type_name) from err

    for _ in range(element.metadata.depth + 1):
        arrow_type = pa.list_(arrow_type)
    return arrow_type


def column_to_arrow(col: ColumnDef) -> pa.DataType:
    if col.is_array:
        return array_to_arrow(col)
    if col.is_struct:
        # Row fields are not discovered; the struct stays opaque
        return pa.struct([])
    return native_to_arrow(col.sql_type, col.size, col.scale, col.signed, col.type_name)


def column_to_arrow_field(col: ColumnDef) -> pa.Field:
    return pa.field(
        col.label,
        column_to_arrow(col),
        nullable=col.nullable,
        metadata=col.metadata.to_arrow(),
    )


class VerticaSchemaReader:
    """
    Reads the schema of a Vertica table or query.

    Responsibilities:
    - Probe result set metadata with an empty query
    - Resolve complex columns through the catalog
    - Convert column definitions to an Arrow schema

    Column failures are collected and reported together as one ErrorList.
    """

    def __init__(self, client: QueryClient, detection: Optional[TypeCodeDetection] = None):
        self.client = client
        self.detection = detection or TypeCodeDetection()
        self.resolver = ComplexTypeResolver(client)

    def _column_def(self, desc: ColumnDescription, info: ColumnInfoQuery) -> ColumnDef:
        col = ColumnDef(
            label=desc.label,
            sql_type=desc.type_code,
            type_name=desc.type_name,
            size=desc.precision,
            scale=desc.scale,
            signed=desc.signed,
            nullable=desc.nullable,
            metadata=ColumnMetadata(name=desc.label),
        )

        if col.sql_type in COMPLEX_SQL_TYPES:
            col = self.resolver.resolve(col, info)

        return self.detection.detect(col, info, self.client)

    def get_column_info(self, source: TableSource) -> List[ColumnDef]:
        info = column_info_query(source)

        try:
            rs = self.client.query(info.empty_query)
        except QueryError as err:
            raise ClientSchemaError(err) from err
        except Exception as exc:
            raise DatabaseReadError(exc).with_context(
                "Could not get column info from Vertica"
            ) from exc

        try:
            descriptions = list(rs.columns)
            columns = collect_all(
                descriptions,
                lambda desc: self._column_def(desc, info),
            )
        except SchemaBridgeError:
            raise
        except Exception as exc:
            raise DatabaseReadError(exc).with_context(
                "Could not get column info from Vertica"
            ) from exc
        finally:
            rs.close()

        log_event("COLUMN_INFO_DISCOVERED", {
            "source": info.empty_query,
            "columns": [c.label for c in columns],
            "detection": self.detection.name,
        }, level=logging.DEBUG)
        return columns

    def read_schema(self, source: TableSource) -> pa.Schema:
        columns = self.get_column_info(source)
        return pa.schema(collect_all(columns, column_to_arrow_field))
