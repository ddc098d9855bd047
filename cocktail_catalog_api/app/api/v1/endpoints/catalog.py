"""
Catalog endpoint for API v1.

Returns the list page in one call: every cocktail with its average
rating, number of ratings, comments and, for signed-in viewers,
whether it is one of their favorites.  Anonymous viewers get the same
page with no favorites.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from cocktail_catalog_api.app.api.deps import get_reader
from cocktail_catalog_api.app.core.security import UserIdentity, get_optional_user
from cocktail_catalog_api.app.schemas.catalog import CatalogRead
from cocktail_catalog_api.app.services.catalog_service import CatalogReader


router = APIRouter()


@router.get("", response_model=CatalogRead)
async def get_catalog(
    viewer: Optional[UserIdentity] = Depends(get_optional_user),
    reader: CatalogReader = Depends(get_reader),
) -> CatalogRead:
    view = await reader.load_catalog(viewer.id if viewer else None)
    return view.to_schema()
