from typing import Dict, Optional, Set, Tuple

import pyarrow as pa
from fastavro import is_avro, reader

from schemabridge.utils.exceptions import MissingConversionError, UnsupportedFormatError


_AVRO_TYPE_MAP = {
    "string": pa.string(),
    "int": pa.int32(),
    "long": pa.int64(),
    "float": pa.float32(),
    "double": pa.float64(),
    "boolean": pa.bool_(),
    "bytes": pa.binary(),
}

_LOGICAL_TYPE_MAP = {
    "date": pa.date32(),
    # Time of day is carried as text, as it is when read from Vertica
    "time-millis": pa.string(),
    "time-micros": pa.string(),
    "timestamp-millis": pa.timestamp("ms"),
    "timestamp-micros": pa.timestamp("us"),
    "uuid": pa.string(),
}

# Numeric widening precedence for unions of numbers
_NUMERIC_ORDER = ["int", "long", "float", "double"]


class AvroAdapter:
    """
    Reads the writer schema of an Avro container file as an Arrow schema.

    Responsibilities:
    - Validate Avro container file
    - Map primitive, logical, record, array and map types
    - Handle union nullability

    DOES NOT:
    - Read data blocks
    - Support recursive records (Arrow types are finite)
    """

    def __init__(self, file_path: str, entity_name: Optional[str] = None):
        self.file_path = file_path
        self.entity_name = entity_name or "unknown_entity"
        self._named_types: Dict[str, object] = {}

    def _register(self, avro_type: dict, namespace: Optional[str]):
        name = avro_type.get("name")
        if not name:
            return
        self._named_types[name] = avro_type
        ns = avro_type.get("namespace", namespace)
        if ns and "." not in name:
            self._named_types[f"{ns}.{name}"] = avro_type

    def _unwrap_union(self, avro_type: list) -> Tuple[object, bool]:
        nullable = "null" in avro_type
        non_null_types = [t for t in avro_type if t != "null"]

        if len(non_null_types) == 1:
            return non_null_types[0], nullable

        # All numeric union → choose widest type
        if non_null_types and all(t in _NUMERIC_ORDER for t in non_null_types):
            widest = max(non_null_types, key=_NUMERIC_ORDER.index)
            return widest, nullable

        raise MissingConversionError(
            f"Unsupported Avro union with incompatible types: {avro_type}"
        )

    def _to_arrow(
        self,
        name: str,
        avro_type,
        namespace: Optional[str] = None,
        recursion_stack: Optional[Set[str]] = None,
    ) -> pa.Field:
        if recursion_stack is None:
            recursion_stack = set()

        nullable = False
        if isinstance(avro_type, list):
            avro_type, nullable = self._unwrap_union(avro_type)

        # Reference to a named type defined earlier in the schema
        if isinstance(avro_type, str) and avro_type in self._named_types:
            avro_type = self._named_types[avro_type]

        return pa.field(
            name,
            self._data_type(name, avro_type, namespace, recursion_stack),
            nullable=nullable,
        )

    def _data_type(self, name, avro_type, namespace, recursion_stack) -> pa.DataType:
        if isinstance(avro_type, str):
            if avro_type not in _AVRO_TYPE_MAP:
                raise MissingConversionError(
                    f"Unsupported Avro type '{avro_type}' for field '{name}'"
                )
            return _AVRO_TYPE_MAP[avro_type]

        kind = avro_type.get("type")

        # --------------------
        # RECORD
        # --------------------
        if kind == "record":
            record_name = avro_type.get("name")
            if record_name in recursion_stack:
                raise MissingConversionError(
                    f"Recursive Avro schema detected for record: {record_name}"
                )
            self._register(avro_type, namespace)
            record_ns = avro_type.get("namespace", namespace)

            recursion_stack.add(record_name)
            try:
                children = [
                    self._to_arrow(
                        subfield.get("name", f"{name}_{idx}"),
                        subfield["type"],
                        record_ns,
                        recursion_stack,
                    )
                    for idx, subfield in enumerate(avro_type.get("fields", []), start=1)
                ]
            finally:
                recursion_stack.discard(record_name)
            return pa.struct(children)

        # --------------------
        # ARRAY / MAP
        # --------------------
        if kind == "array":
            element = self._to_arrow("element", avro_type["items"], namespace, recursion_stack)
            return pa.list_(element)

        if kind == "map":
            value = self._to_arrow("value", avro_type["values"], namespace, recursion_stack)
            return pa.map_(pa.string(), value.type)

        # --------------------
        # LOGICAL / NAMED
        # --------------------
        logical_type = avro_type.get("logicalType")
        if logical_type == "decimal":
            return pa.decimal128(avro_type["precision"], avro_type.get("scale", 0))
        if logical_type in _LOGICAL_TYPE_MAP:
            return _LOGICAL_TYPE_MAP[logical_type]

        if kind == "enum":
            self._register(avro_type, namespace)
            return pa.string()

        if kind == "fixed":
            self._register(avro_type, namespace)
            return pa.binary()

        return self._data_type(name, kind, namespace, recursion_stack)

    def parse(self) -> pa.Schema:
        with open(self.file_path, "rb") as f:
            if not is_avro(f):
                raise UnsupportedFormatError(
                    "Invalid Avro file: expected Avro Object Container File "
                    "(raw/schemaless Avro is not supported)"
                )

            f.seek(0)
            avro_schema = reader(f).writer_schema

        if avro_schema.get("type") != "record":
            raise UnsupportedFormatError(
                "Avro writer schema must be a record to describe a table"
            )

        self._named_types = {}
        self._register(avro_schema, None)
        namespace = avro_schema.get("namespace")
        top_name = avro_schema.get("name")

        fields = []
        for idx, field in enumerate(avro_schema.get("fields", []), start=1):
            raw_name = field.get("name")
            name = raw_name.strip() if raw_name and raw_name.strip() else f"{self.entity_name}_{idx}"
            fields.append(
                self._to_arrow(name, field["type"], namespace, {top_name})
            )

        return pa.schema(fields)
