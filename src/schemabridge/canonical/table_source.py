from dataclasses import dataclass
from typing import Optional, Union


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', "") + '"'


@dataclass(frozen=True)
class TableName:
    """
    A Vertica table, optionally qualified by its schema.
    """
    name: str
    db_schema: Optional[str] = None

    @property
    def table_name(self) -> str:
        return self.name.replace('"', "")

    @property
    def schema_name(self) -> str:
        return (self.db_schema or "").replace('"', "")

    @property
    def full_name(self) -> str:
        if self.db_schema:
            return f"{_quote(self.db_schema)}.{_quote(self.name)}"
        return _quote(self.name)

    @classmethod
    def parse(cls, qualified: str) -> "TableName":
        """
        Parse `table`, `schema.table` or `"schema"."table"`.
        """
        if not qualified or not qualified.strip():
            raise ValueError("Table name must not be empty")

        parts = [p.strip().strip('"') for p in qualified.strip().split(".")]
        if len(parts) == 1:
            return cls(parts[0])
        if len(parts) == 2:
            return cls(parts[1], parts[0])
        raise ValueError(f"Invalid table name: '{qualified}'")


@dataclass(frozen=True)
class TableQuery:
    """
    An arbitrary query whose result columns are treated as a table.
    """
    query: str
    identifier: str = ""


TableSource = Union[TableName, TableQuery]


@dataclass(frozen=True)
class ColumnInfoQuery:
    table_name: str
    db_schema: str
    empty_query: str


def column_info_query(source: TableSource) -> ColumnInfoQuery:
    """
    Build the empty-result probe for a table or query.

    The probe returns no rows; only its result metadata is used.
    Queries have no catalog identity, so name and schema are empty.
    """
    if isinstance(source, TableName):
        return ColumnInfoQuery(
            table_name=source.table_name,
            db_schema=source.schema_name,
            empty_query=f"SELECT * FROM {source.full_name} WHERE 1=0",
        )

    return ColumnInfoQuery(
        table_name="",
        db_schema="",
        empty_query=f"SELECT * FROM ({source.query}) AS x WHERE 1=0",
    )
