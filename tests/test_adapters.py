"""Parquet and Avro schema adapters, format detection and adapter registry."""

from decimal import Decimal

import pyarrow as pa
import pyarrow.parquet as pq
import pytest
from fastavro import parse_schema, writer

from schemabridge.adapters.avro_adapter import AvroAdapter
from schemabridge.adapters.parquet_adapter import ParquetAdapter
from schemabridge.governance.adapter_registry import AdapterRegistry
from schemabridge.input.format_detector import FormatDetector
from schemabridge.utils.exceptions import MissingConversionError, UnsupportedFormatError


def _write_avro(path, schema, records=()):
    with open(path, "wb") as f:
        writer(f, parse_schema(schema), list(records))
    return str(path)


ORDER_SCHEMA = {
    "type": "record",
    "name": "Order",
    "namespace": "sales",
    "fields": [
        {"name": "id", "type": "long"},
        {"name": "name", "type": ["null", "string"], "default": None},
        {
            "name": "amount",
            "type": {"type": "bytes", "logicalType": "decimal", "precision": 10, "scale": 2},
        },
        {"name": "created", "type": {"type": "long", "logicalType": "timestamp-micros"}},
        {"name": "day", "type": {"type": "int", "logicalType": "date"}},
        {"name": "tags", "type": {"type": "array", "items": "string"}},
        {"name": "attrs", "type": {"type": "map", "values": "long"}},
        {
            "name": "address",
            "type": {
                "type": "record",
                "name": "Address",
                "fields": [{"name": "street", "type": "string"}],
            },
        },
        {"name": "shipping", "type": ["null", "Address"], "default": None},
        {"name": "status", "type": {"type": "enum", "name": "Status", "symbols": ["NEW", "DONE"]}},
        {"name": "score", "type": ["int", "double"]},
    ],
}


class TestParquetAdapter:

    def test_reads_schema_from_metadata(self, orders_parquet):
        schema = ParquetAdapter(orders_parquet).parse()

        assert schema.names == ["id", "name"]
        assert schema.field("id").type == pa.int64()
        assert schema.field("id").nullable is False
        assert schema.field("name").nullable is True

    def test_dictionary_columns_use_value_type(self, tmp_path):
        table = pa.table({
            "category": pa.array(["a", "b", "a"]).dictionary_encode(),
            "price": pa.array([Decimal("1.50"), Decimal("2.00"), None], pa.decimal128(12, 2)),
        })
        path = tmp_path / "dict.parquet"
        pq.write_table(table, str(path))

        schema = ParquetAdapter(str(path)).parse()

        assert schema.field("category").type == pa.string()
        assert schema.field("price").type == pa.decimal128(12, 2)

    def test_blank_column_names_use_entity_name(self, tmp_path):
        table = pa.table({"id": pa.array([1, 2]), "  ": pa.array(["a", "b"])})
        path = tmp_path / "blank.parquet"
        pq.write_table(table, str(path))

        schema = ParquetAdapter(str(path), entity_name="orders").parse()

        assert schema.names == ["id", "orders_2"]
        assert schema.field("orders_2").type == pa.string()


class TestAvroAdapter:

    def test_maps_writer_schema(self, tmp_path):
        path = _write_avro(tmp_path / "orders.avro", ORDER_SCHEMA)

        schema = AvroAdapter(path).parse()

        assert schema.field("id").type == pa.int64()
        assert schema.field("id").nullable is False
        assert schema.field("name").type == pa.string()
        assert schema.field("name").nullable is True
        assert schema.field("amount").type == pa.decimal128(10, 2)
        assert schema.field("created").type == pa.timestamp("us")
        assert schema.field("day").type == pa.date32()
        assert schema.field("status").type == pa.string()
        assert schema.field("score").type == pa.float64()

        tags = schema.field("tags").type
        assert pa.types.is_list(tags)
        assert tags.value_type == pa.string()

        attrs = schema.field("attrs").type
        assert pa.types.is_map(attrs)
        assert attrs.key_type == pa.string()
        assert attrs.item_type == pa.int64()

        address = schema.field("address").type
        assert pa.types.is_struct(address)
        assert address.field("street").type == pa.string()

        shipping = schema.field("shipping")
        assert shipping.nullable is True
        assert shipping.type == address

    def test_incompatible_union(self, tmp_path):
        schema = {
            "type": "record",
            "name": "Bad",
            "fields": [{"name": "v", "type": ["string", "long"]}],
        }
        path = _write_avro(tmp_path / "bad.avro", schema)

        with pytest.raises(MissingConversionError):
            AvroAdapter(path).parse()

    def test_recursive_record(self, tmp_path):
        schema = {
            "type": "record",
            "name": "Node",
            "fields": [
                {"name": "value", "type": "long"},
                {"name": "next", "type": ["null", "Node"], "default": None},
            ],
        }
        path = _write_avro(tmp_path / "node.avro", schema)

        with pytest.raises(MissingConversionError, match="Recursive"):
            AvroAdapter(path).parse()

    def test_rejects_non_container_file(self, tmp_path):
        path = tmp_path / "raw.avro"
        path.write_bytes(b"not an avro container")

        with pytest.raises(UnsupportedFormatError):
            AvroAdapter(str(path)).parse()


class TestFormatDetection:

    def test_parquet(self, orders_parquet):
        assert FormatDetector(orders_parquet).detect() == "Parquet"

    def test_avro(self, tmp_path):
        path = _write_avro(tmp_path / "orders.avro", ORDER_SCHEMA)
        assert FormatDetector(path).detect() == "Avro"

    def test_missing_file(self, tmp_path):
        with pytest.raises(UnsupportedFormatError, match="does not exist"):
            FormatDetector(str(tmp_path / "nope.parquet")).detect()

    def test_empty_path(self):
        with pytest.raises(UnsupportedFormatError):
            FormatDetector("").detect()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.parquet"
        path.write_bytes(b"")
        with pytest.raises(UnsupportedFormatError, match="empty"):
            FormatDetector(str(path)).detect()

    @pytest.mark.parametrize("name", ["data.csv", "data"])
    def test_unsupported_extension(self, tmp_path, name):
        path = tmp_path / name
        path.write_text("a,b\n1,2\n")
        with pytest.raises(UnsupportedFormatError):
            FormatDetector(str(path)).detect()


class TestAdapterRegistry:

    def test_lookup_is_case_insensitive(self):
        assert AdapterRegistry.get_adapter("Parquet") is ParquetAdapter
        assert AdapterRegistry.get_adapter("AVRO") is AvroAdapter

    @pytest.mark.parametrize("name", ["", "CSV"])
    def test_unknown_format(self, name):
        with pytest.raises(UnsupportedFormatError):
            AdapterRegistry.get_adapter(name)
