"""
Business logic for cocktail records.

Cocktails live in the ``cocktails`` table of the hosted backend.  The
owner recorded at creation time is the only user allowed to edit or
delete a record; the check here is advisory and mirrors the row level
security policy on the table, which is the real boundary.

Updates are read-modify-write: the stored record is fetched, the
supplied fields are laid over it and the merged record is written
back, so fields a client leaves out are never nulled.  There is no
version column, so two owners' sessions editing the same cocktail at
the same time can lose one of the updates.
"""

import logging
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import NotFoundError, OwnershipError, ValidationError, describe_validation_error
from ..core.security import UserIdentity
from ..core.storage import Storage, contains, eq, gte, ilike, in_, lte
from ..schemas.cocktail import CocktailCreate, CocktailFilters, CocktailRead, CocktailUpdate

logger = logging.getLogger(__name__)

COCKTAILS_TABLE = "cocktails"
WRITABLE_FIELDS = {"name", "description", "ingredients", "price", "image_url"}
# Fields that may be cleared by sending ``null``; the others keep their
# stored value when a client sends ``null`` for them.
NULLABLE_FIELDS = {"description", "image_url"}


class CocktailService:
    """Service for cocktail records."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    async def list_cocktails(self, filters: Optional[CocktailFilters] = None) -> List[CocktailRead]:
        """Return cocktails ordered by name, optionally filtered.

        - ``query``: case-insensitive substring of the name.
        - ``min_price`` / ``max_price``: inclusive price range.
        - ``ingredient``: exact ingredient the cocktail must list.
        """
        conditions = []
        if filters is not None:
            if filters.query and filters.query.strip():
                conditions.append(ilike("name", f"%{filters.query.strip()}%"))
            if filters.min_price is not None:
                conditions.append(gte("price", filters.min_price))
            if filters.max_price is not None:
                conditions.append(lte("price", filters.max_price))
            if filters.ingredient and filters.ingredient.strip():
                conditions.append(contains("ingredients", [filters.ingredient.strip()]))
        rows = await self.storage.select(COCKTAILS_TABLE, conditions, order_by="name")
        return [CocktailRead.model_validate(row) for row in rows]

    async def list_by_ids(self, cocktail_ids: List[str]) -> List[CocktailRead]:
        """Return the cocktails with the given ids, ordered by name."""
        if not cocktail_ids:
            return []
        rows = await self.storage.select(COCKTAILS_TABLE, [in_("id", cocktail_ids)], order_by="name")
        return [CocktailRead.model_validate(row) for row in rows]

    async def find_cocktail(self, cocktail_id: str) -> Optional[CocktailRead]:
        rows = await self.storage.select(COCKTAILS_TABLE, [eq("id", cocktail_id)])
        if not rows:
            return None
        return CocktailRead.model_validate(rows[0])

    async def get_cocktail(self, cocktail_id: str) -> CocktailRead:
        """Return a single cocktail or raise ``NotFoundError``."""
        cocktail = await self.find_cocktail(cocktail_id)
        if cocktail is None:
            raise NotFoundError("cocktail", cocktail_id)
        return cocktail

    async def create_cocktail(self, data: CocktailCreate, user: UserIdentity) -> CocktailRead:
        """Insert a cocktail owned by ``user`` and return it with its new id."""
        row = data.model_dump()
        row["user_id"] = user.id
        stored = await self.storage.insert(COCKTAILS_TABLE, row)
        cocktail = CocktailRead.model_validate(stored)
        logger.info("User %s created cocktail %s ('%s')", user.id, cocktail.id, cocktail.name)
        return cocktail

    async def update_cocktail(
        self,
        cocktail_id: str,
        updates: CocktailUpdate,
        user: UserIdentity,
    ) -> CocktailRead:
        """Merge ``updates`` into the stored cocktail and write it back."""
        current = await self.get_cocktail(cocktail_id)
        if current.user_id != user.id:
            raise OwnershipError(cocktail_id, user.id)

        supplied = {
            key: value
            for key, value in updates.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_FIELDS
        }
        merged = current.model_dump(include=WRITABLE_FIELDS)
        merged.update(supplied)
        try:
            # The merged record must satisfy the same rules as a new one.
            record = CocktailCreate.model_validate(merged).model_dump()
        except PydanticValidationError as exc:
            raise ValidationError(describe_validation_error(exc)) from exc

        rows = await self.storage.update(COCKTAILS_TABLE, record, [eq("id", cocktail_id)])
        if not rows:
            # The row was readable a moment ago; either it has just been
            # deleted or the backend's policy refused the write.
            if await self.find_cocktail(cocktail_id) is None:
                raise NotFoundError("cocktail", cocktail_id)
            raise OwnershipError(cocktail_id, user.id)
        logger.info("User %s updated cocktail %s (%s)", user.id, cocktail_id, ", ".join(sorted(supplied)) or "no fields")
        return CocktailRead.model_validate(rows[0])

    async def delete_cocktail(self, cocktail_id: str, user: UserIdentity) -> bool:
        """Delete a cocktail owned by ``user``.

        Deleting a cocktail that does not exist succeeds and returns
        ``False``.  Ratings, favorites and comments of the cocktail are
        left in place; the backend does not cascade.
        """
        current = await self.find_cocktail(cocktail_id)
        if current is None:
            logger.info("Cocktail %s already absent; nothing to delete", cocktail_id)
            return False
        if current.user_id != user.id:
            raise OwnershipError(cocktail_id, user.id)
        removed = await self.storage.delete(COCKTAILS_TABLE, [eq("id", cocktail_id)])
        if not removed:
            # Same reasoning as for updates: gone in the meantime, or the
            # backend's policy kept the row.
            if await self.find_cocktail(cocktail_id) is None:
                logger.info("Cocktail %s disappeared before it could be deleted", cocktail_id)
                return False
            raise OwnershipError(cocktail_id, user.id)
        logger.info("User %s deleted cocktail %s", user.id, cocktail_id)
        return True
