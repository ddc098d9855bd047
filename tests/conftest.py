"""Shared fixtures: in-memory storage and auth doubles, app and client."""

import asyncio
import itertools
import re
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Set, Tuple

import pytest
from fastapi.testclient import TestClient

from cocktail_catalog_api.app.core.exceptions import CollaboratorError
from cocktail_catalog_api.app.core.security import AuthCallback, AuthCollaborator, UserIdentity
from cocktail_catalog_api.app.core.storage import Filter, Row, Storage
from cocktail_catalog_api.app.main import create_app
from cocktail_catalog_api.app.services.catalog_service import CatalogReader
from cocktail_catalog_api.app.services.mutation_gateway import MutationGateway
from cocktail_catalog_api.app.services.mutation_state import MutationTracker


def _like_to_regex(pattern: str) -> str:
    return ".*".join(re.escape(part) for part in pattern.split("%"))


def _matches(row: Row, f: Filter) -> bool:
    value = row.get(f.column)
    if f.op == "eq":
        return value is not None and str(value) == str(f.value)
    if f.op == "gte":
        return value is not None and value >= f.value
    if f.op == "lte":
        return value is not None and value <= f.value
    if f.op == "ilike":
        return value is not None and re.fullmatch(_like_to_regex(f.value), str(value), re.IGNORECASE) is not None
    if f.op == "contains":
        return all(item in (value or []) for item in f.value)
    if f.op == "in":
        return value is not None and str(value) in {str(item) for item in f.value}
    raise AssertionError(f"unexpected operator {f.op}")


class MemoryStorage(Storage):
    """Storage double keeping tables as lists of dicts.

    No uniqueness or ownership is enforced, like a backend without
    constraints or policies.  ``fail_tables`` maps a table name to the
    message of the error every call on that table raises; ``delay``
    makes each call sleep first.  Updates and deletes on a table listed
    in ``policy_protected`` silently match no rows, the way a row level
    security policy refuses them.
    """

    def __init__(self, timeout: Optional[float] = None, delay: float = 0.0) -> None:
        super().__init__(timeout)
        self.tables: Dict[str, List[Row]] = defaultdict(list)
        self.fail_tables: Dict[str, str] = {}
        self.policy_protected: Set[str] = set()
        self.delay = delay
        self.calls: List[Tuple[str, str]] = []
        self._ids = itertools.count(1)

    def seed(self, table: str, **row: Any) -> Row:
        row.setdefault("id", next(self._ids))
        self.tables[table].append(row)
        return dict(row)

    def writes(self) -> List[Tuple[str, str]]:
        return [call for call in self.calls if call[0] != "select"]

    async def _enter(self, op: str, table: str) -> None:
        self.calls.append((op, table))
        if self.delay:
            await asyncio.sleep(self.delay)
        if table in self.fail_tables:
            raise RuntimeError(self.fail_tables[table])

    def _find(self, table: str, filters: List[Filter]) -> List[Row]:
        return [row for row in self.tables[table] if all(_matches(row, f) for f in filters)]

    async def _select(
        self, table: str, filters: List[Filter], order_by: Optional[str], descending: bool, columns: str
    ) -> List[Row]:
        await self._enter("select", table)
        rows = [dict(row) for row in self._find(table, filters)]
        if order_by:
            rows.sort(key=lambda row: (row.get(order_by) is None, row.get(order_by)), reverse=descending)
        return rows

    async def _insert(self, table: str, row: Row) -> Row:
        await self._enter("insert", table)
        return self.seed(table, **row)

    async def _update(self, table: str, values: Row, filters: List[Filter]) -> List[Row]:
        await self._enter("update", table)
        if table in self.policy_protected:
            return []
        updated = []
        for row in self._find(table, filters):
            row.update(values)
            updated.append(dict(row))
        return updated

    async def _upsert(self, table: str, row: Row, on_conflict: str) -> Row:
        await self._enter("upsert", table)
        keys = on_conflict.split(",")
        for existing in self.tables[table]:
            if all(str(existing.get(key)) == str(row.get(key)) for key in keys):
                existing.update(row)
                return dict(existing)
        return self.seed(table, **row)

    async def _delete(self, table: str, filters: List[Filter]) -> int:
        await self._enter("delete", table)
        if table in self.policy_protected:
            return 0
        doomed = {id(row) for row in self._find(table, filters)}
        self.tables[table] = [row for row in self.tables[table] if id(row) not in doomed]
        return len(doomed)


class FakeAuth(AuthCollaborator):
    """Auth double: a token table plus a signed-in user for sessions."""

    def __init__(self, tokens: Optional[Dict[str, UserIdentity]] = None, current: Optional[UserIdentity] = None):
        self.tokens = dict(tokens or {})
        self.current = current
        self.listeners: List[AuthCallback] = []

    async def current_user(self, access_token: Optional[str] = None) -> Optional[UserIdentity]:
        if access_token is None:
            return self.current
        return self.tokens.get(access_token)

    def on_auth_change(self, callback: AuthCallback) -> Callable[[], None]:
        self.listeners.append(callback)
        return lambda: self.listeners.remove(callback)

    def switch_user(self, user: Optional[UserIdentity]) -> None:
        self.current = user
        for callback in list(self.listeners):
            callback(user)


class FakeBackend:
    """Backend double.  Like PostgREST, it refuses bearer tokens it does not know."""

    def __init__(self, storage: MemoryStorage, auth: FakeAuth) -> None:
        self.storage = storage
        self.auth = auth
        self.tokens_seen: List[Optional[str]] = []

    @asynccontextmanager
    async def storage_for(self, access_token: Optional[str] = None) -> AsyncIterator[MemoryStorage]:
        self.tokens_seen.append(access_token)
        if access_token is not None and access_token not in self.auth.tokens:
            raise CollaboratorError("JWT expired")
        yield self.storage


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def alice() -> UserIdentity:
    return UserIdentity(id="user-alice", email="alice@example.com")


@pytest.fixture
def bob() -> UserIdentity:
    return UserIdentity(id="user-bob", email="bob@example.com")


@pytest.fixture
def auth(alice: UserIdentity, bob: UserIdentity) -> FakeAuth:
    return FakeAuth(tokens={"alice-token": alice, "bob-token": bob})


@pytest.fixture
def reader(storage: MemoryStorage) -> CatalogReader:
    return CatalogReader(storage)


@pytest.fixture
def gateway(storage: MemoryStorage) -> MutationGateway:
    return MutationGateway(storage, MutationTracker())


@pytest.fixture
def backend(storage: MemoryStorage, auth: FakeAuth) -> FakeBackend:
    return FakeBackend(storage, auth)


@pytest.fixture
def client(backend: FakeBackend) -> TestClient:
    return TestClient(create_app(backend=backend))


@pytest.fixture
def alice_headers() -> Dict[str, str]:
    return {"Authorization": "Bearer alice-token"}


@pytest.fixture
def bob_headers() -> Dict[str, str]:
    return {"Authorization": "Bearer bob-token"}


@pytest.fixture
def mojito(storage: MemoryStorage, alice: UserIdentity) -> Row:
    return storage.seed(
        "cocktails",
        name="Mojito",
        description="Rum, lime and mint",
        ingredients=["Rum", "Lime", "Mint"],
        price=8.5,
        image_url=None,
        user_id=alice.id,
    )
