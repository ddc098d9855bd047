"""
Storage collaborator contract.

The catalog never talks SQL.  It issues generic ``select``,
``insert``, ``update``, ``upsert`` and ``delete`` calls against named
tables, with a small set of filters and an optional ordering, and
interprets the rows that come back.  Concrete backends subclass
``Storage`` and implement the underscore methods; the public methods
add the per-call timeout and translate every backend failure into
``CollaboratorError`` so callers see a single failure path.

The backend may or may not enforce uniqueness and ownership.  Code
using this contract must not assume it does.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, Iterable, List, Optional, TypeVar

from .config import settings
from .exceptions import CatalogError, CollaboratorError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Row = Dict[str, Any]

FILTER_OPS = {"eq", "gte", "lte", "ilike", "contains", "in"}


@dataclass(frozen=True)
class Filter:
    """A single column predicate.

    ``op`` is one of ``eq``, ``gte``, ``lte``, ``ilike`` (SQL LIKE
    pattern, case insensitive), ``contains`` (array column contains all
    of ``value``) or ``in`` (column value is one of ``value``).
    """

    column: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in FILTER_OPS:
            raise ValueError(f"Unsupported filter operator '{self.op}'")


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def gte(column: str, value: Any) -> Filter:
    return Filter(column, "gte", value)


def lte(column: str, value: Any) -> Filter:
    return Filter(column, "lte", value)


def ilike(column: str, pattern: str) -> Filter:
    return Filter(column, "ilike", pattern)


def contains(column: str, values: List[Any]) -> Filter:
    return Filter(column, "contains", list(values))


def in_(column: str, values: Iterable[Any]) -> Filter:
    return Filter(column, "in", list(values))


async def call_remote(what: str, awaitable: Awaitable[T], timeout: Optional[float] = None) -> T:
    """Await a backend call with a timeout, mapping failures to ``CollaboratorError``.

    ``what`` is a short description used in log lines and in the
    timeout message.  Catalog errors raised by the backend adapter
    itself pass through untouched.
    """
    limit = settings.remote_timeout_seconds if timeout is None else timeout
    try:
        return await asyncio.wait_for(awaitable, timeout=limit)
    except asyncio.TimeoutError as exc:
        logger.error("Remote call timed out after %ss: %s", limit, what)
        raise CollaboratorError(f"Backend did not answer within {limit:g}s ({what})", exc) from exc
    except CatalogError:
        raise
    except Exception as exc:
        # PostgREST and GoTrue errors expose ``message``; anything else
        # (connection errors) only has its string form.
        message = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
        logger.error("Remote call failed (%s): %s", what, message)
        raise CollaboratorError(message, exc) from exc


class Storage:
    """Base class for storage backends.

    Subclasses implement ``_select``, ``_insert``, ``_update``,
    ``_upsert`` and ``_delete``.  Callers use the public methods only.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = timeout

    async def select(
        self,
        table: str,
        filters: Iterable[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        columns: str = "*",
    ) -> List[Row]:
        """Return the rows of ``table`` matching every filter."""
        return await call_remote(
            f"select {table}",
            self._select(table, list(filters), order_by, descending, columns),
            self.timeout,
        )

    async def insert(self, table: str, row: Row) -> Row:
        """Insert one row and return it as stored (with generated columns)."""
        return await call_remote(f"insert {table}", self._insert(table, row), self.timeout)

    async def update(self, table: str, values: Row, filters: Iterable[Filter]) -> List[Row]:
        """Update matching rows and return them as stored."""
        filters = list(filters)
        if not filters:
            raise ValueError("Refusing to update without a filter")
        return await call_remote(f"update {table}", self._update(table, values, filters), self.timeout)

    async def upsert(self, table: str, row: Row, on_conflict: str) -> Row:
        """Insert ``row`` or replace the row sharing the ``on_conflict`` columns."""
        return await call_remote(f"upsert {table}", self._upsert(table, row, on_conflict), self.timeout)

    async def delete(self, table: str, filters: Iterable[Filter]) -> int:
        """Delete matching rows and return how many were removed."""
        filters = list(filters)
        if not filters:
            raise ValueError("Refusing to delete without a filter")
        return await call_remote(f"delete {table}", self._delete(table, filters), self.timeout)

    async def _select(
        self, table: str, filters: List[Filter], order_by: Optional[str], descending: bool, columns: str
    ) -> List[Row]:
        raise NotImplementedError

    async def _insert(self, table: str, row: Row) -> Row:
        raise NotImplementedError

    async def _update(self, table: str, values: Row, filters: List[Filter]) -> List[Row]:
        raise NotImplementedError

    async def _upsert(self, table: str, row: Row, on_conflict: str) -> Row:
        raise NotImplementedError

    async def _delete(self, table: str, filters: List[Filter]) -> int:
        raise NotImplementedError
