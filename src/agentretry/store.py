r"""Row store interface and a wrapper retrying every store call.

Agents read and write rows of a hosted relational backend by table
name. The backend client itself is not part of this package: anything
implementing ``RowStore`` can be wrapped in ``RetryingRowStore`` so that
transient failures (deadlocks, dropped connections, timeouts) are
retried with the executor's policy.
"""

from __future__ import annotations

__all__ = ["RowStore", "RetryingRowStore"]

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from agentretry.executor_async import AsyncRetryExecutor
    from agentretry.policy import RetryPolicy

logger: logging.Logger = logging.getLogger(__name__)


@runtime_checkable
class RowStore(Protocol):
    """Row-oriented data store addressed by table name.

    Implementations raise ``DatabaseError`` on failure so that the
    default retry predicate can tell transient failures apart.
    """

    async def query(self, table: str, filters: Mapping[str, Any]) -> list[dict[str, Any]]:
        """Return the rows of ``table`` matching every filter."""

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> None:
        """Insert ``rows`` into ``table``."""

    async def update(
        self, table: str, filters: Mapping[str, Any], patch: Mapping[str, Any]
    ) -> None:
        """Apply ``patch`` to the rows of ``table`` matching every filter."""


class RetryingRowStore:
    """Row store that routes every call through a retry executor.

    Each call is executed with the label ``"<verb> <table>"``, e.g.
    ``"query picks"``. The wrapped store stays owned by the caller.

    Args:
        store: The store to wrap.
        executor: The async retry executor.
        policy: Optional policy overriding the executor's default.

    Example:
        ```pycon
        >>> from agentretry import AsyncRetryExecutor, RetryingRowStore
        >>> store = RetryingRowStore(my_store, AsyncRetryExecutor())  # doctest: +SKIP
        >>> rows = await store.query("picks", {"status": "pending"})  # doctest: +SKIP

        ```
    """

    def __init__(
        self, store: RowStore, executor: AsyncRetryExecutor, policy: RetryPolicy | None = None
    ) -> None:
        self._store = store
        self._executor = executor
        self._policy = policy

    async def query(self, table: str, filters: Mapping[str, Any]) -> list[dict[str, Any]]:
        rows = await self._executor.execute(
            lambda: self._store.query(table, filters), f"query {table}", self._policy
        )
        logger.debug(f"Fetched {len(rows)} rows from {table}")
        return rows

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> None:
        if not rows:
            return
        await self._executor.execute(
            lambda: self._store.insert(table, rows), f"insert {table}", self._policy
        )
        logger.debug(f"Inserted {len(rows)} rows into {table}")

    async def update(
        self, table: str, filters: Mapping[str, Any], patch: Mapping[str, Any]
    ) -> None:
        await self._executor.execute(
            lambda: self._store.update(table, filters, patch), f"update {table}", self._policy
        )
