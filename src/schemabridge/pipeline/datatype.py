import re
from typing import Tuple

import pyarrow as pa

from schemabridge.standards.sql_types import SqlType
from schemabridge.standards.vertica_catalog import (
    DECIMAL_DEFAULT_PRECISION,
    DECIMAL_DEFAULT_SCALE,
    DECIMAL_MAX_PRECISION,
    LONG_LENGTH,
)
from schemabridge.utils.exceptions import (
    MissingArrowConversionError,
    MissingSqlConversionError,
)


_STRING_SQL_TYPES = {
    SqlType.CHAR,
    SqlType.CLOB,
    SqlType.LONGNVARCHAR,
    SqlType.LONGVARCHAR,
    SqlType.NCHAR,
    SqlType.NCLOB,
    SqlType.NVARCHAR,
    SqlType.VARCHAR,
    SqlType.REF,
    SqlType.SQLXML,
    # Arrow has no time-of-day type Vertica can export; read as text
    SqlType.TIME,
}

_BINARY_SQL_TYPES = {
    SqlType.BINARY,
    SqlType.BLOB,
    SqlType.VARBINARY,
    SqlType.LONGVARBINARY,
}

_STRING_LIKE_OTHER_PREFIXES = ("interval", "uuid")


def default_decimal() -> pa.DataType:
    return pa.decimal128(DECIMAL_DEFAULT_PRECISION, DECIMAL_DEFAULT_SCALE)


def _decimal(precision: int, scale: int) -> pa.DataType:
    if precision == 0 and scale == 0:
        return default_decimal()
    scale = max(scale, 0)
    precision = max(precision, scale, 1)
    if precision > DECIMAL_MAX_PRECISION:
        # Keep the integer digits; give up fractional digits down to min(scale, 6).
        int_digits = precision - scale
        scale = max(DECIMAL_MAX_PRECISION - int_digits, min(scale, 6))
        precision = DECIMAL_MAX_PRECISION
    return pa.decimal128(precision, scale)


def native_to_arrow(
    sql_type: int,
    precision: int,
    scale: int,
    signed: bool,
    type_name: str,
) -> pa.DataType:
    """
    Map a Vertica primitive column to an Arrow type.

    Unsigned integers widen to the next signed type; unsigned BIGINT has
    none and becomes a zero-scale decimal at max precision.

    Raises:
        MissingSqlConversionError: the code has no Arrow equivalent
    """

    # -------------------------------------------------
    # Integers
    # -------------------------------------------------
    if sql_type == SqlType.BIGINT:
        return pa.int64() if signed else pa.decimal128(DECIMAL_MAX_PRECISION, 0)

    if sql_type == SqlType.INTEGER:
        return pa.int32() if signed else pa.int64()

    if sql_type in (SqlType.SMALLINT, SqlType.TINYINT):
        return pa.int32()

    if sql_type == SqlType.ROWID:
        return pa.int64()

    # -------------------------------------------------
    # Exact and approximate numerics
    # -------------------------------------------------
    if sql_type in (SqlType.DECIMAL, SqlType.NUMERIC):
        return _decimal(precision, scale)

    if sql_type in (SqlType.DOUBLE, SqlType.REAL):
        return pa.float64()

    if sql_type == SqlType.FLOAT:
        return pa.float32()

    # -------------------------------------------------
    # Everything else
    # -------------------------------------------------
    if sql_type in (SqlType.BIT, SqlType.BOOLEAN):
        return pa.bool_()

    if sql_type in _BINARY_SQL_TYPES:
        return pa.binary()

    if sql_type in _STRING_SQL_TYPES:
        return pa.string()

    if sql_type == SqlType.DATE:
        return pa.date32()

    if sql_type == SqlType.TIMESTAMP:
        return pa.timestamp("us")

    if sql_type == SqlType.OTHER:
        normalized = (type_name or "").lower()
        if normalized.startswith(_STRING_LIKE_OTHER_PREFIXES):
            return pa.string()

    raise MissingSqlConversionError(sql_type, type_name)


def is_primitive_arrow_type(data_type: pa.DataType) -> bool:
    return not (
        pa.types.is_list(data_type)
        or pa.types.is_large_list(data_type)
        or pa.types.is_fixed_size_list(data_type)
        or pa.types.is_map(data_type)
        or pa.types.is_struct(data_type)
    )


def arrow_primitive_to_native(data_type: pa.DataType, strlen: int) -> str:
    """
    Vertica type text for a primitive Arrow type.

    Strings longer than the VARCHAR limit become LONG VARCHAR.
    Lists, maps and structs are handled by the DDL generator.
    """
    if pa.types.is_binary(data_type) or pa.types.is_large_binary(data_type):
        return f"VARBINARY({LONG_LENGTH})"

    if pa.types.is_boolean(data_type):
        return "BOOLEAN"

    if pa.types.is_int8(data_type):
        return "TINYINT"

    if pa.types.is_int16(data_type):
        return "SMALLINT"

    if pa.types.is_int32(data_type):
        return "INTEGER"

    if pa.types.is_int64(data_type):
        return "BIGINT"

    if pa.types.is_date(data_type):
        return "DATE"

    if pa.types.is_interval(data_type):
        return "INTERVAL"

    if pa.types.is_decimal(data_type):
        if data_type.precision == 0:
            return "DECIMAL"
        return f"DECIMAL({data_type.precision}, {data_type.scale})"

    if pa.types.is_float64(data_type):
        return "DOUBLE PRECISION"

    if pa.types.is_float32(data_type):
        return "FLOAT"

    if pa.types.is_null(data_type):
        return "null"

    if pa.types.is_timestamp(data_type):
        return "TIMESTAMP"

    if pa.types.is_string(data_type) or pa.types.is_large_string(data_type):
        vtype = "LONG VARCHAR" if strlen > LONG_LENGTH else "VARCHAR"
        return f"{vtype}({strlen})"

    raise MissingArrowConversionError(data_type)


# ------------------------------------------------------------------
# Vertica type text -> type code
# ------------------------------------------------------------------

_NATIVE_TYPE_CODES = {
    "BOOLEAN": SqlType.BOOLEAN,
    "TINYINT": SqlType.TINYINT,
    "SMALLINT": SqlType.SMALLINT,
    "INT": SqlType.INTEGER,
    "INTEGER": SqlType.INTEGER,
    "BIGINT": SqlType.BIGINT,
    "INT8": SqlType.BIGINT,
    "FLOAT": SqlType.FLOAT,
    "REAL": SqlType.REAL,
    "DOUBLE PRECISION": SqlType.DOUBLE,
    "FLOAT8": SqlType.DOUBLE,
    "DECIMAL": SqlType.DECIMAL,
    "NUMERIC": SqlType.NUMERIC,
    "NUMBER": SqlType.NUMERIC,
    "MONEY": SqlType.NUMERIC,
    "CHAR": SqlType.CHAR,
    "VARCHAR": SqlType.VARCHAR,
    "LONG VARCHAR": SqlType.LONGVARCHAR,
    "BINARY": SqlType.BINARY,
    "VARBINARY": SqlType.VARBINARY,
    "LONG VARBINARY": SqlType.LONGVARBINARY,
    "DATE": SqlType.DATE,
    "TIME": SqlType.TIME,
    "TIMESTAMP": SqlType.TIMESTAMP,
    "INTERVAL": SqlType.OTHER,
    "UUID": SqlType.OTHER,
}

_NATIVE_TYPE_PATTERN = re.compile(
    r"^\s*(?P<name>[A-Za-z][A-Za-z0-9 ]*?)\s*(?:\((?P<args>[^)]*)\))?\s*$"
)


def parse_native_type(text: str) -> Tuple[int, int, int]:
    """
    Parse Vertica type text such as `DECIMAL(12, 2)` or `LONG VARCHAR(70000)`.

    Returns:
        (sql_type, precision, scale); precision holds the length for
        character and binary types.
    """
    match = _NATIVE_TYPE_PATTERN.match(text or "")
    if not match:
        raise MissingSqlConversionError(SqlType.OTHER, text)

    name = " ".join(match.group("name").upper().split())
    if name not in _NATIVE_TYPE_CODES:
        # INTERVAL DAY TO SECOND and friends
        first_word = name.split(" ")[0]
        if first_word not in ("INTERVAL", "UUID"):
            raise MissingSqlConversionError(SqlType.OTHER, text)
        name = first_word

    args = [a.strip() for a in (match.group("args") or "").split(",") if a.strip()]
    precision = int(args[0]) if args else 0
    scale = int(args[1]) if len(args) > 1 else 0

    return int(_NATIVE_TYPE_CODES[name]), precision, scale
