"""
Schema for favorite membership.

Favorites carry no payload: a user either has a cocktail in their
favorites or not.
"""

from pydantic import BaseModel


class FavoriteStatus(BaseModel):
    cocktail_id: str
    is_favorite: bool
