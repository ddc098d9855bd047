"""
Catalog reader.

``CatalogReader.load_catalog`` builds the list page: every cocktail
ordered by name plus three enrichments fetched from their own tables,
namely the average rating, the viewer's favorites and the comments.
The cocktails themselves are required; if they cannot be read the
whole load fails.  The enrichments are optional: when one of them
cannot be read it is replaced by its empty value (``0.0`` averages, no
favorites, no comments) and a warning is logged, so the page still
renders.

Averages are computed here from the raw rating rows on every load.
Rows pointing at cocktails that no longer exist (deletes do not
cascade) are ignored.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Dict, List, Optional, Set, TypeVar

from ..core.exceptions import AuthRequiredError, CollaboratorError
from ..core.security import UserIdentity
from ..core.storage import Storage
from ..schemas.catalog import CatalogEntry, CatalogRead
from ..schemas.cocktail import CocktailFilters, CocktailRead
from ..schemas.comment import CommentRead
from ..schemas.rating import RatingSummary
from .cocktail_service import CocktailService
from .comment_service import CommentService
from .favorite_service import FavoriteService
from .rating_service import RatingService

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CatalogView:
    """Locally cached catalog state for one viewer."""

    items: List[CocktailRead] = field(default_factory=list)
    rating_average: Dict[str, float] = field(default_factory=dict)
    rating_count: Dict[str, int] = field(default_factory=dict)
    favorite_ids: Set[str] = field(default_factory=set)
    comments: Dict[str, List[CommentRead]] = field(default_factory=dict)

    def item(self, cocktail_id: str) -> Optional[CocktailRead]:
        for cocktail in self.items:
            if cocktail.id == cocktail_id:
                return cocktail
        return None

    def entry(self, cocktail: CocktailRead) -> CatalogEntry:
        return CatalogEntry(
            cocktail=cocktail,
            average_rating=self.rating_average.get(cocktail.id, 0.0),
            rating_count=self.rating_count.get(cocktail.id, 0),
            is_favorite=cocktail.id in self.favorite_ids,
            comments=list(self.comments.get(cocktail.id, [])),
        )

    @property
    def entries(self) -> List[CatalogEntry]:
        return [self.entry(cocktail) for cocktail in self.items]

    def to_schema(self) -> CatalogRead:
        return CatalogRead(entries=self.entries)


class CatalogReader:
    """Read side of the catalog."""

    def __init__(self, storage: Storage) -> None:
        self.cocktails = CocktailService(storage)
        self.ratings = RatingService(storage)
        self.favorites = FavoriteService(storage)
        self.comments = CommentService(storage)

    async def load_catalog(self, viewer_id: Optional[str] = None) -> CatalogView:
        """Load every cocktail and merge the per-cocktail aggregates.

        Raises ``CollaboratorError`` only when the cocktails themselves
        cannot be fetched.
        """
        items = await self.cocktails.list_cocktails()
        known = {cocktail.id for cocktail in items}

        summaries, favorite_ids, comments = await asyncio.gather(
            self._enrichment("ratings", self.ratings.summaries(), {}),
            self._favorites_for(viewer_id),
            self._enrichment("comments", self.comments.comments_by_cocktail(), {}),
        )

        view = CatalogView(items=items)
        for cocktail_id, (average, count) in summaries.items():
            if cocktail_id in known:
                view.rating_average[cocktail_id] = average
                view.rating_count[cocktail_id] = count
        for cocktail in items:
            view.rating_average.setdefault(cocktail.id, 0.0)
            view.rating_count.setdefault(cocktail.id, 0)
        view.favorite_ids = favorite_ids & known
        view.comments = {cocktail_id: entries for cocktail_id, entries in comments.items() if cocktail_id in known}
        logger.debug(
            "Loaded catalog: %d cocktails, %d rated, %d favorites",
            len(items),
            sum(1 for count in view.rating_count.values() if count),
            len(view.favorite_ids),
        )
        return view

    async def _favorites_for(self, viewer_id: Optional[str]) -> Set[str]:
        if not viewer_id:
            return set()
        return await self._enrichment("favorites", self.favorites.favorite_ids(viewer_id), set())

    @staticmethod
    async def _enrichment(name: str, awaitable: Awaitable[T], default: T) -> T:
        try:
            return await awaitable
        except CollaboratorError as exc:
            logger.warning("Could not load %s; rendering catalog without them: %s", name, exc.message)
            return default

    async def list_items(self, filters: Optional[CocktailFilters] = None) -> List[CocktailRead]:
        return await self.cocktails.list_cocktails(filters)

    async def get_item(self, cocktail_id: str) -> CocktailRead:
        return await self.cocktails.get_cocktail(cocktail_id)

    async def list_favorite_items(self, user: Optional[UserIdentity]) -> List[CocktailRead]:
        """Return the cocktails ``user`` has favorited, ordered by name."""
        if user is None:
            raise AuthRequiredError("Sign in to see your favorites")
        favorite_ids = await self.favorites.favorite_ids(user.id)
        return await self.cocktails.list_by_ids(sorted(favorite_ids))

    async def list_comments(self, cocktail_id: str) -> List[CommentRead]:
        await self.cocktails.get_cocktail(cocktail_id)
        return await self.comments.list_comments(cocktail_id)

    async def rating_summary(self, cocktail_id: str) -> RatingSummary:
        await self.cocktails.get_cocktail(cocktail_id)
        return await self.ratings.summary(cocktail_id)
