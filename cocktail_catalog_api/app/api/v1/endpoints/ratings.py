"""
Rating endpoints for API v1.

A signed-in user rates a cocktail from 1 to 5; rating again replaces
the earlier score.  Both routes answer with the cocktail's average
recomputed from all stored scores.
"""

from fastapi import APIRouter, Depends

from cocktail_catalog_api.app.api.deps import get_gateway, get_reader
from cocktail_catalog_api.app.core.security import UserIdentity, get_current_user
from cocktail_catalog_api.app.schemas.rating import RatingSet, RatingSummary
from cocktail_catalog_api.app.services.catalog_service import CatalogReader
from cocktail_catalog_api.app.services.mutation_gateway import MutationGateway


router = APIRouter()


@router.put("/items/{cocktail_id}/rating", response_model=RatingSummary, summary="Rate a cocktail")
async def set_rating(
    cocktail_id: str,
    data: RatingSet,
    current_user: UserIdentity = Depends(get_current_user),
    gateway: MutationGateway = Depends(get_gateway),
) -> RatingSummary:
    return await gateway.set_rating(cocktail_id, current_user, data.score)


@router.get("/items/{cocktail_id}/rating", response_model=RatingSummary, summary="Average rating")
async def get_rating(
    cocktail_id: str,
    reader: CatalogReader = Depends(get_reader),
) -> RatingSummary:
    return await reader.rating_summary(cocktail_id)
