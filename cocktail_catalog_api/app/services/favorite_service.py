"""
Business logic for favorites.

A favorite is a ``(user_id, cocktail_id)`` row in the ``favorites``
table; presence is the whole payload.  Toggling reads the current
membership and then inserts or deletes.  That is a check-then-act
sequence: two toggles for the same pair racing each other can leave
either state behind.
"""

import logging
from typing import Set

from ..core.storage import Storage, eq
from ..schemas.cocktail import coerce_id

logger = logging.getLogger(__name__)

FAVORITES_TABLE = "favorites"


class FavoriteService:
    """Service for favorite membership."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    async def is_favorite(self, cocktail_id: str, user_id: str) -> bool:
        rows = await self.storage.select(
            FAVORITES_TABLE, [eq("user_id", user_id), eq("cocktail_id", cocktail_id)]
        )
        return bool(rows)

    async def toggle(self, cocktail_id: str, user_id: str) -> bool:
        """Flip membership for the pair and return the new state."""
        if await self.is_favorite(cocktail_id, user_id):
            # Without a unique constraint there may be several rows for
            # the pair; the filter removes all of them.
            await self.storage.delete(
                FAVORITES_TABLE, [eq("user_id", user_id), eq("cocktail_id", cocktail_id)]
            )
            logger.info("User %s removed cocktail %s from favorites", user_id, cocktail_id)
            return False
        await self.storage.insert(FAVORITES_TABLE, {"user_id": user_id, "cocktail_id": cocktail_id})
        logger.info("User %s added cocktail %s to favorites", user_id, cocktail_id)
        return True

    async def favorite_ids(self, user_id: str) -> Set[str]:
        """Return the ids of every cocktail ``user_id`` has favorited."""
        rows = await self.storage.select(FAVORITES_TABLE, [eq("user_id", user_id)])
        return {str(coerce_id(row["cocktail_id"])) for row in rows}
