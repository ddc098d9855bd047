"""
Schemas for the merged catalog view.

One ``CatalogEntry`` per cocktail combines the record itself with the
aggregates the list page shows next to it.
"""

from typing import List

from pydantic import BaseModel, Field

from .cocktail import CocktailRead
from .comment import CommentRead


class CatalogEntry(BaseModel):
    cocktail: CocktailRead
    average_rating: float = 0.0
    rating_count: int = 0
    is_favorite: bool = False
    comments: List[CommentRead] = Field(default_factory=list)


class CatalogRead(BaseModel):
    """Schema for the catalog page: entries ordered by cocktail name."""

    entries: List[CatalogEntry] = Field(default_factory=list)
