import sys

from schemabridge.execution.config_executor import ConfigExecutor


def main():
    if len(sys.argv) != 2:
        print("Usage: python -m schemabridge.run_config <config.yaml>")
        sys.exit(1)

    config_path = sys.argv[1]
    executor = ConfigExecutor(config_path)
    result = executor.execute()

    print("\n=== Execution Completed ===")
    print(f"Table: {result.get('table')}")
    print(f"Format: {result.get('input_format')}")
    print(f"Columns: {len(result.get('columns', []))}")


if __name__ == "__main__":
    main()
