"""
Top‑level router for version 1 of the API.

This router aggregates the catalog's routers under a unified prefix.
"""

from fastapi import APIRouter

from .endpoints import (
    cocktails,
    ratings,
    favorites,
    comments,
    catalog,
    info,
)

router = APIRouter()

router.include_router(cocktails.router, prefix="/items", tags=["cocktails"])
# Ratings, favorites and comments hang off ``/items/{id}`` and declare
# their full paths themselves.
router.include_router(ratings.router, tags=["ratings"])
router.include_router(favorites.router, tags=["favorites"])
router.include_router(comments.router, tags=["comments"])
router.include_router(catalog.router, prefix="/catalog", tags=["catalog"])
router.include_router(info.router, prefix="/info", tags=["info"])
