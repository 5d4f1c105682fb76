"""
Interface to the Vertica query client.

The client itself (connection, authentication, execution) lives outside
this package. Implementations raise QueryError when a statement fails;
any other exception is treated as an unexpected client fault.
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence, TypeVar

from schemabridge.utils.exceptions import CatalogRowNotFound

T = TypeVar("T")


@dataclass(frozen=True)
class ColumnDescription:
    """
    Result set metadata for one column.
    """
    label: str
    type_code: int
    type_name: str
    precision: int = 0
    scale: int = 0
    signed: bool = True
    nullable: bool = True


class ResultHandle(Protocol):
    @property
    def columns(self) -> Sequence[ColumnDescription]:
        ...

    def fetchone(self) -> Optional[Mapping[str, Any]]:
        ...

    def close(self) -> None:
        ...


class QueryClient(Protocol):
    def query(self, sql: str) -> ResultHandle:
        ...


def query_and_next(
    client: QueryClient,
    sql: str,
    on_row: Callable[[Mapping[str, Any]], T],
    on_no_row: Optional[Callable[[str], T]] = None,
) -> T:
    """
    Run a single-row catalog probe.

    Calls on_row with the first row, or on_no_row with the query text
    when there is none. The result handle is always closed.
    """
    rs = client.query(sql)
    try:
        row = rs.fetchone()
        if row is None:
            if on_no_row is None:
                raise CatalogRowNotFound(sql)
            return on_no_row(sql)
        return on_row(row)
    finally:
        rs.close()
