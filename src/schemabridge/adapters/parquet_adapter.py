from typing import Optional

import pyarrow as pa
import pyarrow.parquet as pq


def _plain_type(data_type: pa.DataType) -> pa.DataType:
    # Dictionary-encoded columns are stored as their value type
    if pa.types.is_dictionary(data_type):
        return _plain_type(data_type.value_type)

    if pa.types.is_list(data_type) or pa.types.is_large_list(data_type):
        value_field = data_type.value_field
        return pa.list_(value_field.with_type(_plain_type(value_field.type)))

    if pa.types.is_struct(data_type):
        return pa.struct([
            child.with_type(_plain_type(child.type)) for child in data_type
        ])

    return data_type


class ParquetAdapter:
    """
    Reads the Arrow schema of a Parquet file.

    Responsibilities:
    - Read the schema from file metadata (no row groups are scanned)
    - Replace dictionary encodings with their value types
    - Name blank columns after the entity and their position

    DOES NOT:
    - Deduplicate fields
    - Apply Vertica specific rules
    """

    def __init__(self, file_path: str, entity_name: Optional[str] = None):
        self.file_path = file_path
        self.entity_name = entity_name or "unknown_entity"

    def parse(self) -> pa.Schema:
        pf = pq.ParquetFile(self.file_path)
        schema = pf.schema_arrow

        fields = []
        for idx, f in enumerate(schema, start=1):
            name = f.name.strip() or f"{self.entity_name}_{idx}"
            fields.append(f.with_name(name).with_type(_plain_type(f.type)))

        return pa.schema(fields, metadata=schema.metadata)
