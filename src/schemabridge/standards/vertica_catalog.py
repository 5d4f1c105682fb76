"""
Vertica system catalog constants.

Vertica tracks 1-D arrays and sets of primitives as native types whose
ids are offsets from fixed bases:

    array id = NATIVE_ARRAY_BASE_ID + primitive id
    set id   = SET_BASE_ID + primitive id

Vertica does not publish a maximum primitive id, so the distance between
the two bases is used as one. Everything outside these two ranges is a
nested or complex-element type recorded in `complex_types`.
"""

NATIVE_ARRAY_BASE_ID = 1500
SET_BASE_ID = 2700
PRIMITIVES_MAX_ID = SET_BASE_ID - NATIVE_ARRAY_BASE_ID
SET_MAX_ID = SET_BASE_ID + PRIMITIVES_MAX_ID

# complex_types.field_type_name prefix for a child that is itself complex
COMPLEX_TYPE_NAME_PREFIX = "_ct_"

# Vertica limits used when generating DDL
LONG_LENGTH = 65000
DECIMAL_MAX_PRECISION = 38
DECIMAL_DEFAULT_PRECISION = 10
DECIMAL_DEFAULT_SCALE = 0

# INFER_EXTERNAL_TABLE_DDL marker for columns it could not type
UNKNOWN_TYPE_MARKER = "UNKNOWN"

# Alias of the staging table in generated MERGE statements
MERGE_TEMP_ALIAS = "temp"

ELEMENT_LABEL = "element"


def _literal(value) -> str:
    return str(value).replace("'", "''")


def column_type_query(table_name: str, db_schema: str, column_name: str) -> str:
    schema_cond = f" AND table_schema='{_literal(db_schema)}'" if db_schema else ""
    return (
        "SELECT data_type_id, data_type FROM columns "
        f"WHERE table_name='{_literal(table_name)}'{schema_cond} "
        f"AND column_name='{_literal(column_name)}'"
    )


def column_type_id_query(table_name: str, db_schema: str, column_name: str) -> str:
    schema_cond = f" AND table_schema='{_literal(db_schema)}'" if db_schema else ""
    return (
        "SELECT data_type_id FROM columns "
        f"WHERE table_name='{_literal(table_name)}'{schema_cond} "
        f"AND column_name='{_literal(column_name)}'"
    )


def primitive_type_query(type_id: int) -> str:
    return f"SELECT type_id, jdbc_type, type_name FROM types WHERE type_id={int(type_id)}"


def complex_type_query(type_id: int) -> str:
    return (
        "SELECT field_type_name, type_id, field_id, numeric_scale "
        f"FROM complex_types WHERE type_id='{int(type_id)}'"
    )


def complex_type_exists_query(type_id: int) -> str:
    return f"SELECT field_type_name FROM complex_types WHERE type_id='{int(type_id)}'"
