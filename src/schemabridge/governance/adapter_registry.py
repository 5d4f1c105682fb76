from schemabridge.adapters.avro_adapter import AvroAdapter
from schemabridge.adapters.parquet_adapter import ParquetAdapter
from schemabridge.utils.exceptions import UnsupportedFormatError


class AdapterRegistry:
    """
    Maps detected input formats to schema adapters.
    """

    _REGISTRY = {
        "PARQUET": ParquetAdapter,
        "AVRO": AvroAdapter,
    }

    @classmethod
    def get_adapter(cls, format_name: str):
        if not format_name:
            raise UnsupportedFormatError("Format name must not be empty")

        key = format_name.upper()

        if key not in cls._REGISTRY:
            raise UnsupportedFormatError(
                f"No adapter registered for format: {format_name}"
            )

        return cls._REGISTRY[key]
