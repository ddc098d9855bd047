"""
Request-scoped dependencies shared by the v1 endpoints.

Storage is opened per request with the caller's bearer token so the
backend evaluates its access policies as that user.  Only tokens the
auth service accepted are forwarded.  The submission tracker is shared
by the whole application: duplicate submissions are detected across
requests.
"""

from typing import AsyncIterator, Optional

from fastapi import Depends, Request

from ..core.security import UserIdentity, get_access_token, get_optional_user
from ..core.storage import Storage
from ..services.catalog_service import CatalogReader
from ..services.mutation_gateway import MutationGateway
from ..services.mutation_state import MutationTracker


async def get_storage(
    request: Request,
    token: Optional[str] = Depends(get_access_token),
    viewer: Optional[UserIdentity] = Depends(get_optional_user),
) -> AsyncIterator[Storage]:
    # A token the auth service rejected would be refused by the backend
    # as well; such callers read as anonymous.
    if viewer is None:
        token = None
    async with request.app.state.backend.storage_for(token) as storage:
        yield storage


def get_tracker(request: Request) -> MutationTracker:
    return request.app.state.tracker


def get_reader(storage: Storage = Depends(get_storage)) -> CatalogReader:
    return CatalogReader(storage)


def get_gateway(
    storage: Storage = Depends(get_storage),
    tracker: MutationTracker = Depends(get_tracker),
) -> MutationGateway:
    return MutationGateway(storage, tracker)
