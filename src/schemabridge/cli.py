import argparse
import json
import os
import shutil
from typing import Any, Dict, Optional

from schemabridge.router import route


def _clean_output_dir(path: str) -> None:
    if not os.path.isdir(path):
        return
    for name in os.listdir(path):
        full = os.path.join(path, name)
        if os.path.isfile(full) or os.path.islink(full):
            os.remove(full)
        elif os.path.isdir(full):
            shutil.rmtree(full)


def _write_json(path: str, payload: Dict[str, Any]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def _write_text(path: str, content: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


def _read_text(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _persist_artifacts(response: Dict[str, Any], output_dir: str) -> None:
    # Always write summary
    summary = {
        "status": response.get("status"),
        "request_id": response.get("request_id"),
        "table": response.get("table"),
        "input_format": response.get("input_format"),
        "columns": response.get("columns"),
    }
    # Drop null values
    summary = {k: v for k, v in summary.items() if v is not None}

    _write_json(os.path.join(output_dir, "run_summary.json"), summary)

    ddl = response.get("ddl") or {}
    if ddl.get("table_ddl"):
        _write_text(os.path.join(output_dir, "create_table.sql"), ddl["table_ddl"])

    if ddl.get("external_table_ddl"):
        _write_text(
            os.path.join(output_dir, "create_external_table.sql"),
            ddl["external_table_ddl"],
        )


def _build_payload_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "file_path": args.file,
        "table": args.table,
        "strlen": args.strlen,
        "array_length": args.array_length,
        "if_not_exists": not args.no_if_not_exists,
        "external_table_ddl": _read_text(args.external_table_ddl),
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Vertica Schema Bridge CLI")

    parser.add_argument("--config", help="Path to JSON config file")
    parser.add_argument("--file", help="Source schema file path (Parquet or Avro)")
    parser.add_argument("--table", help="Target table, e.g. sales.orders")
    parser.add_argument("--strlen", type=int, default=1024, help="Default VARCHAR length")
    parser.add_argument(
        "--array-length",
        type=int,
        default=0,
        help="Bound for ARRAY/SET columns (0 means unbounded)",
    )
    parser.add_argument(
        "--external-table-ddl",
        help="File holding an inferred CREATE EXTERNAL TABLE statement to repair",
    )
    parser.add_argument("--no-if-not-exists", action="store_true")

    parser.add_argument("--output-dir", default="artifacts")
    parser.add_argument("--clean-output-dir", action="store_true")
    return parser


def main(argv=None):
    class C:
        RESET = "\033[0m"
        BOLD = "\033[1m"
        DIM = "\033[2m"
        RED = "\033[31m"
        GREEN = "\033[32m"
        BLUE = "\033[34m"

    def cprint(text: str, color: str = C.RESET, bold: bool = False):
        prefix = (C.BOLD if bold else "") + color
        print(f"{prefix}{text}{C.RESET}")

    args = build_parser().parse_args(argv)

    # Load payload
    if args.config:
        with open(args.config, "r", encoding="utf-8") as f:
            payload = json.load(f)
    else:
        payload = _build_payload_from_args(args)

    # Prepare output dir
    if args.output_dir:
        os.makedirs(args.output_dir, exist_ok=True)
        if args.clean_output_dir:
            _clean_output_dir(args.output_dir)

    try:
        cprint("\n[START] Table DDL generation started", C.BLUE, bold=True)
        cprint(f"[INFO] Table={payload.get('table')}  File={payload.get('file_path')}", C.DIM)
        print()

        response = route(payload)

        cprint(response["ddl"]["table_ddl"], C.RESET)

        if args.output_dir:
            _persist_artifacts(response, args.output_dir)
            cprint(f"\n[DONE] Artifacts written to: {args.output_dir}", C.GREEN, bold=True)

        cprint("[COMPLETE] Table DDL generation completed", C.GREEN, bold=True)

    except Exception as e:
        cprint("\n[FAILED] Table DDL generation failed.", C.RED, bold=True)
        cprint(str(e), C.RED)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
