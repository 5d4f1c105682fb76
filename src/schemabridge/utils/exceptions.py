from typing import List, Optional

from schemabridge.standards.sql_types import sql_type_name


class SchemaBridgeError(Exception):
    """
    Base exception for all schema bridge errors.

    Errors carry a context chain so callers can add where the failure
    happened without losing what failed.
    """

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message
        self.contexts: List[str] = []

    def with_context(self, context: str) -> "SchemaBridgeError":
        self.contexts.append(context)
        return self

    @property
    def full_context(self) -> str:
        if not self.contexts:
            return self.message
        return "\n".join(reversed(self.contexts)) + "\n" + self.message

    def __str__(self) -> str:
        return self.full_context


# ------------------------------------------------------------------
# Conversion errors
# ------------------------------------------------------------------

class MissingConversionError(SchemaBridgeError):
    """
    No mapping exists for a native or Arrow type.
    """
    pass


class MissingSqlConversionError(MissingConversionError):
    def __init__(self, sql_type: int, type_name: str):
        super().__init__(
            "Could not find conversion for unsupported SQL type: "
            f"{sql_type_name(sql_type)} ({type_name})"
        )
        self.sql_type = sql_type
        self.type_name = type_name


class MissingArrowConversionError(MissingConversionError):
    def __init__(self, data_type):
        super().__init__(
            f"Could not find conversion for unsupported Arrow type: {data_type}"
        )
        self.data_type = data_type


class ArrayElementConversionError(MissingConversionError):
    def __init__(self, sql_type: int, type_name: str):
        super().__init__(
            "Could not convert array element of type "
            f"{sql_type_name(sql_type)} ({type_name})"
        )
        self.sql_type = sql_type
        self.type_name = type_name


class MissingElementTypeError(SchemaBridgeError):
    def __init__(self, column: str = ""):
        super().__init__(f"Array column '{column}' has no element definition")
        self.column = column


class MapDataTypeConversionError(SchemaBridgeError):
    """
    Raised when either side of a map is not a primitive type.
    The side that converted is reported as resolved.
    """

    def __init__(
        self,
        key_error: Optional[SchemaBridgeError],
        value_error: Optional[SchemaBridgeError],
    ):
        key_msg = key_error.full_context if key_error is not None else "resolved"
        value_msg = value_error.full_context if value_error is not None else "resolved"
        super().__init__(
            "Map key and value must be primitive types. "
            f"Key type: {key_msg}. Value type: {value_msg}."
        )
        self.key_error = key_error
        self.value_error = value_error


class StructFieldsError(SchemaBridgeError):
    def __init__(self, cause: SchemaBridgeError):
        super().__init__(f"Could not convert struct fields: {cause.full_context}")
        self.cause = cause


class SchemaConversionError(SchemaBridgeError):
    """
    Wraps a lower level mapping error with user facing context.
    """

    def __init__(self, cause: SchemaBridgeError):
        super().__init__(cause.full_context)
        self.cause = cause


# ------------------------------------------------------------------
# Catalog errors
# ------------------------------------------------------------------

class UnexpectedCatalogStateError(SchemaBridgeError):
    pass


class VerticaComplexTypeNotFound(UnexpectedCatalogStateError):
    def __init__(self, type_id: int):
        super().__init__(f"Complex type {type_id} not found in complex_types")
        self.type_id = type_id


class VerticaNativeTypeNotFound(UnexpectedCatalogStateError):
    def __init__(self, type_id: int):
        super().__init__(f"Native type {type_id} not found in types")
        self.type_id = type_id


class CatalogColumnNotFound(UnexpectedCatalogStateError):
    def __init__(self, table_name: str, column_name: str):
        super().__init__(
            f"Column '{column_name}' of table '{table_name}' not found in columns"
        )
        self.table_name = table_name
        self.column_name = column_name


class CatalogRowNotFound(UnexpectedCatalogStateError):
    def __init__(self, query: str):
        super().__init__(f"Catalog query returned no rows: {query}")
        self.query = query


class ComplexTypeCycleError(UnexpectedCatalogStateError):
    def __init__(self, type_id: int):
        super().__init__(f"Cycle in complex_types while resolving type {type_id}")
        self.type_id = type_id


# ------------------------------------------------------------------
# Client errors
# ------------------------------------------------------------------

class QueryError(SchemaBridgeError):
    """
    Raised by query client implementations when a statement fails.
    """
    pass


class ClientSchemaError(SchemaBridgeError):
    def __init__(self, cause: SchemaBridgeError):
        super().__init__(
            "Client failure when trying to retrieve schema: " + cause.full_context
        )
        self.cause = cause


class DatabaseReadError(SchemaBridgeError):
    """
    Unexpected fault from the client layer.
    """

    def __init__(self, cause: BaseException):
        super().__init__(f"Unexpected error while reading from Vertica: {cause!r}")
        self.cause = cause


# ------------------------------------------------------------------
# Aggregation
# ------------------------------------------------------------------

class ErrorList(SchemaBridgeError):
    """
    Independent failures collected in one report.
    """

    def __init__(self, errors: List[SchemaBridgeError]):
        self.errors = list(errors)
        super().__init__(
            "\n".join(err.full_context for err in self.errors)
        )

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self):
        return iter(self.errors)


# ------------------------------------------------------------------
# Write path errors
# ------------------------------------------------------------------

class UnknownColumnTypesError(SchemaBridgeError):
    def __init__(self):
        super().__init__(
            "Inferred external table schema contains columns of unknown type. "
            "Provide a schema for those columns."
        )


class InvalidExternalTableStatementError(SchemaBridgeError):
    def __init__(self, statement: str):
        super().__init__(
            f"Could not find a column definition list in: {statement}"
        )
        self.statement = statement


class TableNotEnoughRowsError(SchemaBridgeError):
    def __init__(self, schema_count: int, table_count: int, table_name: str = ""):
        super().__init__(
            "Number of columns in the target table should be greater or equal "
            "to number of columns in the source schema. "
            f"Source schema columns: {schema_count}. "
            f"Target table {table_name} columns: {table_count}"
        )
        self.schema_count = schema_count
        self.table_count = table_count


class InvalidMapSchemaError(SchemaBridgeError):
    def __init__(self, column: str):
        super().__init__(
            f"Map column '{column}' must have primitive key and value types"
        )
        self.column = column


class InvalidTableSchemaComplexType(SchemaBridgeError):
    def __init__(self):
        super().__init__(
            "Table schema must contain at least one native type column"
        )


class EmptySchemaError(SchemaBridgeError):
    def __init__(self):
        super().__init__("Table schema contains no columns")


class UnsupportedFormatError(SchemaBridgeError):
    """Raised when input file format is not supported."""
    pass
