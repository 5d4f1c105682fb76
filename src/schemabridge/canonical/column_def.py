from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

import pyarrow as pa

from schemabridge.standards.sql_types import SqlType


_NAME_KEY = b"name"
_IS_SET_KEY = b"is_set"
_DEPTH_KEY = b"depth"
_MAX_LENGTH_KEY = b"maxlength"


def _text(value) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


@dataclass(frozen=True)
class ColumnMetadata:
    """
    Metadata carried on a column node and on the Arrow field built from it.

    is_set  distinguishes a Vertica SET from an ARRAY (both are lists in Arrow)
    depth   number of extra list layers around a nested array's element
    max_length declared length used when repairing external table DDL
    """
    name: str = ""
    is_set: bool = False
    depth: int = 0
    max_length: Optional[int] = None

    def to_arrow(self) -> Dict[bytes, bytes]:
        metadata = {
            _NAME_KEY: self.name.encode("utf-8"),
            _IS_SET_KEY: b"true" if self.is_set else b"false",
            _DEPTH_KEY: str(self.depth).encode("utf-8"),
        }
        if self.max_length is not None:
            metadata[_MAX_LENGTH_KEY] = str(self.max_length).encode("utf-8")
        return metadata

    @classmethod
    def from_arrow(cls, metadata: Optional[Mapping]) -> "ColumnMetadata":
        if not metadata:
            return cls()

        values = {
            (k if isinstance(k, bytes) else str(k).encode("utf-8")): v
            for k, v in metadata.items()
        }

        max_length = values.get(_MAX_LENGTH_KEY)
        return cls(
            name=_text(values.get(_NAME_KEY, b"")),
            is_set=_text(values.get(_IS_SET_KEY, b"false")).lower() == "true",
            depth=int(_text(values.get(_DEPTH_KEY, b"0"))),
            max_length=int(_text(max_length)) if max_length is not None else None,
        )


def field_metadata(arrow_field: pa.Field) -> ColumnMetadata:
    return ColumnMetadata.from_arrow(arrow_field.metadata)


@dataclass(frozen=True)
class ColumnDef:
    """
    One Vertica column, or one node of a column's type tree.

    children holds exactly one element definition for ARRAY columns.
    STRUCT columns are opaque: Vertica row fields are not resolved.
    """
    label: str
    sql_type: int
    type_name: str
    size: int
    scale: int
    signed: bool
    nullable: bool
    metadata: ColumnMetadata = field(default_factory=ColumnMetadata)
    children: Tuple["ColumnDef", ...] = ()

    @property
    def is_array(self) -> bool:
        return self.sql_type == SqlType.ARRAY

    @property
    def is_struct(self) -> bool:
        return self.sql_type == SqlType.STRUCT

    @property
    def element(self) -> Optional["ColumnDef"]:
        return self.children[0] if self.children else None
