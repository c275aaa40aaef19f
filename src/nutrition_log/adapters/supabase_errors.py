"""Helpers for mapping PostgREST errors onto domain errors."""

from collections.abc import Iterator
from contextlib import contextmanager

from postgrest.exceptions import APIError

from nutrition_log.errors import TableMissingError

MISSING_TABLE_CODE = "PGRST205"


@contextmanager
def missing_table_guard(table: str) -> Iterator[None]:
    """Raise TableMissingError when PostgREST reports an unknown table."""
    try:
        yield
    except APIError as exc:
        if exc.code == MISSING_TABLE_CODE:
            raise TableMissingError(f"Table '{table}' does not exist") from exc
        raise
