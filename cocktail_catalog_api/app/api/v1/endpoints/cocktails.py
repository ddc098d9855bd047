"""
Cocktail endpoints for API v1.

CRUD routes for cocktail records.  Listing and lookup are public;
creating requires a signed-in user, and editing or deleting requires
being the cocktail's owner.  Errors are mapped to status codes by the
handlers registered in ``main``.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from cocktail_catalog_api.app.api.deps import get_gateway, get_reader
from cocktail_catalog_api.app.core.security import UserIdentity, get_current_user
from cocktail_catalog_api.app.schemas.cocktail import (
    CocktailCreate,
    CocktailFilters,
    CocktailRead,
    CocktailUpdate,
)
from cocktail_catalog_api.app.services.catalog_service import CatalogReader
from cocktail_catalog_api.app.services.mutation_gateway import MutationGateway


router = APIRouter()


@router.get("", response_model=List[CocktailRead])
async def list_cocktails(
    query: Optional[str] = Query(None, description="Part of the cocktail name"),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    ingredient: Optional[str] = Query(None, description="Ingredient the cocktail must contain"),
    reader: CatalogReader = Depends(get_reader),
) -> List[CocktailRead]:
    """List cocktails ordered by name.

    - **query**: case-insensitive match on part of the name.
    - **min_price**, **max_price**: inclusive price range.
    - **ingredient**: only cocktails listing this ingredient.
    """
    filters = CocktailFilters(query=query, min_price=min_price, max_price=max_price, ingredient=ingredient)
    return await reader.list_items(filters)


@router.get("/{cocktail_id}", response_model=CocktailRead)
async def get_cocktail(
    cocktail_id: str,
    reader: CatalogReader = Depends(get_reader),
) -> CocktailRead:
    """Retrieve a single cocktail.  Raises 404 if it does not exist."""
    return await reader.get_item(cocktail_id)


@router.post("", response_model=CocktailRead, status_code=status.HTTP_201_CREATED)
async def create_cocktail(
    cocktail: CocktailCreate,
    current_user: UserIdentity = Depends(get_current_user),
    gateway: MutationGateway = Depends(get_gateway),
) -> CocktailRead:
    """Create a cocktail owned by the current user."""
    return await gateway.create_item(cocktail, current_user)


@router.put("/{cocktail_id}", response_model=CocktailRead)
async def update_cocktail(
    cocktail_id: str,
    updates: CocktailUpdate,
    current_user: UserIdentity = Depends(get_current_user),
    gateway: MutationGateway = Depends(get_gateway),
) -> CocktailRead:
    """Update a cocktail.

    Only the owner may modify it.  Fields left out of the body keep
    their stored values.
    """
    return await gateway.update_item(cocktail_id, updates, current_user)


@router.delete("/{cocktail_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_cocktail(
    cocktail_id: str,
    current_user: UserIdentity = Depends(get_current_user),
    gateway: MutationGateway = Depends(get_gateway),
) -> Response:
    """Delete a cocktail (owner only).

    Deleting a cocktail that is already gone also answers 204.  Its
    ratings, favorites and comments are not removed.
    """
    await gateway.delete_item(cocktail_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
