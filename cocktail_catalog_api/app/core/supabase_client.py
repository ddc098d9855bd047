"""
Supabase adapters for the storage and auth collaborators.

``SupabaseBackend`` owns the connection details.  It creates one
Supabase client for the auth service at startup and hands out
request-scoped PostgREST clients for storage, authorised with the
caller's access token so that the row level security policies on the
tables see the real user.  Without a token the anon key is used and
the policies apply to an anonymous role.

Usage::

    backend = SupabaseBackend(settings.supabase_url, settings.supabase_key)
    await backend.connect()
    async with backend.storage_for(token) as storage:
        rows = await storage.select("cocktails", order_by="name")
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, List, Optional

from postgrest import AsyncPostgrestClient
from supabase import AsyncClient, acreate_client

from .config import settings
from .exceptions import CollaboratorError
from .security import AuthCallback, AuthCollaborator, UserIdentity
from .storage import Filter, Row, Storage, call_remote

logger = logging.getLogger(__name__)


def _identity(user: Any) -> Optional[UserIdentity]:
    if user is None:
        return None
    return UserIdentity(id=str(user.id), email=getattr(user, "email", None))


class SupabaseStorage(Storage):
    """Storage collaborator backed by a PostgREST client."""

    def __init__(self, client: Any, timeout: Optional[float] = None) -> None:
        super().__init__(timeout)
        self._client = client

    @staticmethod
    def _apply(query: Any, filters: List[Filter]) -> Any:
        for f in filters:
            if f.op == "eq":
                query = query.eq(f.column, f.value)
            elif f.op == "gte":
                query = query.gte(f.column, f.value)
            elif f.op == "lte":
                query = query.lte(f.column, f.value)
            elif f.op == "ilike":
                query = query.ilike(f.column, f.value)
            elif f.op == "contains":
                query = query.contains(f.column, f.value)
            elif f.op == "in":
                query = query.in_(f.column, f.value)
        return query

    async def _select(
        self, table: str, filters: List[Filter], order_by: Optional[str], descending: bool, columns: str
    ) -> List[Row]:
        query = self._apply(self._client.table(table).select(columns), filters)
        if order_by:
            query = query.order(order_by, desc=descending)
        response = await query.execute()
        return list(response.data or [])

    async def _insert(self, table: str, row: Row) -> Row:
        response = await self._client.table(table).insert(row).execute()
        if not response.data:
            raise CollaboratorError(f"Insert into {table} returned no row")
        return response.data[0]

    async def _update(self, table: str, values: Row, filters: List[Filter]) -> List[Row]:
        query = self._apply(self._client.table(table).update(values), filters)
        response = await query.execute()
        return list(response.data or [])

    async def _upsert(self, table: str, row: Row, on_conflict: str) -> Row:
        response = await self._client.table(table).upsert(row, on_conflict=on_conflict).execute()
        if not response.data:
            raise CollaboratorError(f"Upsert into {table} returned no row")
        return response.data[0]

    async def _delete(self, table: str, filters: List[Filter]) -> int:
        query = self._apply(self._client.table(table).delete(), filters)
        response = await query.execute()
        return len(response.data or [])


class SupabaseAuth(AuthCollaborator):
    """Auth collaborator backed by Supabase Auth (GoTrue)."""

    def __init__(self, client: AsyncClient, timeout: Optional[float] = None) -> None:
        self._client = client
        self.timeout = timeout

    async def current_user(self, access_token: Optional[str] = None) -> Optional[UserIdentity]:
        try:
            response = await call_remote("auth get_user", self._client.auth.get_user(access_token), self.timeout)
        except CollaboratorError as exc:
            # GoTrue answers 401/403 for malformed or expired tokens; that
            # is an anonymous caller, not a backend failure.
            if getattr(exc.original, "status", None) in (401, 403):
                logger.info("Rejected access token: %s", exc.message)
                return None
            raise
        if response is None:
            return None
        return _identity(response.user)

    def on_auth_change(self, callback: AuthCallback) -> Callable[[], None]:
        def _listener(event: Any, session: Any) -> None:
            logger.debug("Auth state changed: %s", event)
            callback(_identity(session.user if session else None))

        subscription = self._client.auth.on_auth_state_change(_listener)
        return subscription.unsubscribe


class SupabaseBackend:
    """Connection holder for one Supabase project."""

    def __init__(self, url: str, key: str, timeout: Optional[float] = None) -> None:
        self.url = url.rstrip("/")
        self.key = key
        self.timeout = timeout
        self._client: Optional[AsyncClient] = None
        self._auth: Optional[SupabaseAuth] = None

    async def connect(self) -> None:
        """Create the Supabase client used for auth calls."""
        if not self.url or not self.key:
            raise CollaboratorError("SUPABASE_URL and SUPABASE_KEY must be set")
        self._client = await acreate_client(self.url, self.key)
        self._auth = SupabaseAuth(self._client, self.timeout)
        logger.info("Connected to Supabase project at %s", self.url)

    @property
    def auth(self) -> SupabaseAuth:
        if self._auth is None:
            raise CollaboratorError("Supabase backend is not connected")
        return self._auth

    @asynccontextmanager
    async def storage_for(self, access_token: Optional[str] = None) -> AsyncIterator[SupabaseStorage]:
        """Yield a storage collaborator acting as the owner of ``access_token``."""
        headers = {
            "apikey": self.key,
            "Authorization": f"Bearer {access_token or self.key}",
        }
        rest = AsyncPostgrestClient(f"{self.url}/rest/v1", headers=headers)
        try:
            yield SupabaseStorage(rest, self.timeout)
        finally:
            await rest.aclose()


def create_backend() -> SupabaseBackend:
    """Build a backend from the application settings."""
    return SupabaseBackend(settings.supabase_url, settings.supabase_key, settings.remote_timeout_seconds)
