"""
Combinators for running a fallible operation over a sequence.

collect_all   attempts every item and raises one ErrorList with every failure.
first_failure stops at the first failure and re-raises it unchanged.
"""

from typing import Callable, Iterable, List, TypeVar

from schemabridge.utils.exceptions import ErrorList, SchemaBridgeError

T = TypeVar("T")
R = TypeVar("R")


def collect_all(items: Iterable[T], operation: Callable[[T], R]) -> List[R]:
    results: List[R] = []
    errors: List[SchemaBridgeError] = []

    for item in items:
        try:
            results.append(operation(item))
        except ErrorList as err:
            errors.extend(err.errors)
        except SchemaBridgeError as err:
            errors.append(err)

    if errors:
        raise ErrorList(errors)
    return results


def first_failure(items: Iterable[T], operation: Callable[[T], R]) -> List[R]:
    return [operation(item) for item in items]
