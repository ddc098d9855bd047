"""
Comment endpoints for API v1.

Anyone can read a cocktail's comments; posting requires a signed-in
user.  There are no routes for editing or deleting comments.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from cocktail_catalog_api.app.api.deps import get_gateway, get_reader
from cocktail_catalog_api.app.core.security import UserIdentity, get_current_user
from cocktail_catalog_api.app.schemas.comment import CommentCreate, CommentRead
from cocktail_catalog_api.app.services.catalog_service import CatalogReader
from cocktail_catalog_api.app.services.mutation_gateway import MutationGateway


router = APIRouter()


@router.get("/items/{cocktail_id}/comments", response_model=List[CommentRead], summary="List comments")
async def list_comments(
    cocktail_id: str,
    reader: CatalogReader = Depends(get_reader),
) -> List[CommentRead]:
    return await reader.list_comments(cocktail_id)


@router.post(
    "/items/{cocktail_id}/comments",
    response_model=CommentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Post a comment",
)
async def add_comment(
    cocktail_id: str,
    data: CommentCreate,
    current_user: UserIdentity = Depends(get_current_user),
    gateway: MutationGateway = Depends(get_gateway),
) -> CommentRead:
    return await gateway.add_comment(cocktail_id, current_user, data.content)
