"""
Favorite endpoints for API v1.

``POST /items/{id}/favorite`` flips the current user's membership and
returns the new state.  ``GET /favorites`` lists the current user's
favorite cocktails.
"""

from typing import List

from fastapi import APIRouter, Depends

from cocktail_catalog_api.app.api.deps import get_gateway, get_reader
from cocktail_catalog_api.app.core.security import UserIdentity, get_current_user
from cocktail_catalog_api.app.schemas.cocktail import CocktailRead
from cocktail_catalog_api.app.schemas.favorite import FavoriteStatus
from cocktail_catalog_api.app.services.catalog_service import CatalogReader
from cocktail_catalog_api.app.services.mutation_gateway import MutationGateway


router = APIRouter()


@router.post("/items/{cocktail_id}/favorite", response_model=FavoriteStatus, summary="Toggle a favorite")
async def toggle_favorite(
    cocktail_id: str,
    current_user: UserIdentity = Depends(get_current_user),
    gateway: MutationGateway = Depends(get_gateway),
) -> FavoriteStatus:
    return await gateway.toggle_favorite(cocktail_id, current_user)


@router.get("/favorites", response_model=List[CocktailRead], summary="List my favorites")
async def list_favorites(
    current_user: UserIdentity = Depends(get_current_user),
    reader: CatalogReader = Depends(get_reader),
) -> List[CocktailRead]:
    return await reader.list_favorite_items(current_user)
