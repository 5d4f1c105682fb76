from typing import Dict, List

import pyarrow as pa

# ---------------- Input dispatch ----------------
from schemabridge.input.format_detector import FormatDetector
from schemabridge.governance.adapter_registry import AdapterRegistry

# ---------------- Pipeline steps ----------------
from schemabridge.canonical.column_def import field_metadata
from schemabridge.canonical.table_source import TableName
from schemabridge.pipeline.schema_validator import check_valid_table_schema

# ---------------- Outputs ----------------
from schemabridge.outputs.vertica_ddl import DEFAULT_STRLEN, VerticaDDLGenerator

# ---------------- Observability ----------------
from schemabridge.observability.logger import (log_event, generate_request_id, RequestTimer,)


def describe_columns(schema: pa.Schema, generator: VerticaDDLGenerator) -> List[Dict]:
    return [
        {
            "name": f.name,
            "arrow_type": str(f.type),
            "vertica_type": generator.vertica_type(f.type, field_metadata(f)),
            "nullable": f.nullable,
        }
        for f in schema
    ]


# ==========================================================
# ROUTER
# ==========================================================
def route(payload: Dict) -> Dict:
    """
    Schema bridge main entry point.

    Flow:
    Source file → Arrow schema → Validation → Vertica DDL
    (→ repaired external table DDL when a statement is given)
    """

    request_id = generate_request_id()
    timer = RequestTimer()

    table = payload.get("table")
    log_event("TABLE_DDL_STARTED", {
        "request_id": request_id,
        "table": table,
        "file_path": payload.get("file_path"),
    })

    try:
        # --------------------------------------------------
        # Required inputs
        # --------------------------------------------------
        file_path = payload.get("file_path")
        if not table:
            raise ValueError("Target table name is required")

        table_name = TableName.parse(table)
        strlen = int(payload.get("strlen") or DEFAULT_STRLEN)
        array_length = int(payload.get("array_length") or 0)
        if_not_exists = payload.get("if_not_exists", True)
        external_table_ddl = payload.get("external_table_ddl")

        # --------------------------------------------------
        # Phase 1 – Format detection + Adapter dispatch
        # --------------------------------------------------
        input_format = FormatDetector(file_path).detect()
        adapter_cls = AdapterRegistry.get_adapter(input_format)
        schema = adapter_cls(file_path, entity_name=table_name.table_name).parse()

        # --------------------------------------------------
        # Phase 2 – Validation
        # --------------------------------------------------
        check_valid_table_schema(schema)

        # --------------------------------------------------
        # Phase 3 – DDL
        # --------------------------------------------------
        generator = VerticaDDLGenerator(strlen=strlen, array_length=array_length)

        response = {
            "status": "SUCCESS",
            "request_id": request_id,
            "table": table_name.full_name,
            "input_format": input_format,
            "columns": describe_columns(schema, generator),
            "column_defs": generator.make_table_column_defs(schema),
            "ddl": {
                "table_ddl": generator.generate_table_ddl(
                    table_name, schema, if_not_exists=if_not_exists
                ),
            },
        }

        if external_table_ddl:
            response["ddl"]["external_table_ddl"] = generator.infer_external_table_schema(
                external_table_ddl, schema, table_name.table_name
            )

        log_event("TABLE_DDL_COMPLETED", {
            "request_id": request_id,
            "table": table_name.full_name,
            "input_format": input_format,
            "column_count": len(schema),
            "duration_seconds": timer.duration(),
        })
        return response

    except Exception as e:
        log_event("TABLE_DDL_FAILED", {
            "request_id": request_id,
            "table": table,
            "error": str(e),
        })
        raise
