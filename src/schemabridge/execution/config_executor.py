import json
import os
from typing import Dict

import yaml

from schemabridge.router import route


class ConfigExecutor:
    """
    Executes the schema bridge pipeline using YAML configuration.

    Expected layout:

        source:
          file_path: data/orders.parquet
        table: sales.orders
        settings:
          strlen: 1024
          array_length: 0
          external_table_ddl: null
        output_dir: outputs
    """

    def __init__(self, config_path: str):
        self.config_path = config_path
        self.config = self._load_config()

    # ------------------------------------------
    # Load YAML
    # ------------------------------------------
    def _load_config(self) -> Dict:
        if not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        with open(self.config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    # ------------------------------------------
    # Build Router Payload
    # ------------------------------------------
    def _build_payload(self) -> Dict:
        cfg = self.config

        source_cfg = cfg.get("source", {}) or {}
        settings = cfg.get("settings", {}) or {}

        return {
            "file_path": source_cfg.get("file_path"),
            "table": cfg.get("table"),
            "strlen": settings.get("strlen"),
            "array_length": settings.get("array_length", 0),
            "if_not_exists": settings.get("if_not_exists", True),
            "external_table_ddl": settings.get("external_table_ddl"),
        }

    # ------------------------------------------
    # Execute Pipeline
    # ------------------------------------------
    def execute(self) -> Dict:
        payload = self._build_payload()
        result = route(payload)
        self._save_outputs(result)
        return result

    # ------------------------------------------
    # Save Outputs
    # ------------------------------------------
    def _save_outputs(self, result: Dict):
        output_dir = self.config.get("output_dir", "outputs")
        os.makedirs(output_dir, exist_ok=True)

        table = result.get("table", "unknown").replace('"', "")

        with open(os.path.join(output_dir, f"{table}.columns.json"), "w", encoding="utf-8") as f:
            json.dump(result.get("columns", []), f, indent=2)

        ddl = result.get("ddl", {})
        with open(os.path.join(output_dir, f"{table}.sql"), "w", encoding="utf-8") as f:
            f.write(ddl.get("table_ddl", ""))
            if ddl.get("external_table_ddl"):
                f.write("\n\n")
                f.write(ddl["external_table_ddl"])
