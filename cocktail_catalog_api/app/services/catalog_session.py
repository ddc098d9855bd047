"""
View state for one viewer of the catalog.

``CatalogSession`` is what a front end holds on to.  It caches the
last ``CatalogView``, forwards user actions to the mutation gateway
with the session's viewer and patches only the parts of the cached
view each action touched: the rated cocktail's average, the toggled
favorite, the commented cocktail's thread, the edited or deleted
record.  Adding a cocktail reloads everything; if only that reload
fails, the new cocktail is appended, ``stale`` is set and
``last_error`` stays empty, since the action itself succeeded.

Failures never raise out of the action methods.  The message is kept
per affordance (``failure``) and in ``last_error``; the cached view is
left as it was.  The cache is only refreshed by ``reload`` or by the
session's own actions; changes made by other users are not pushed.
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from ..core.exceptions import CatalogError
from ..core.security import AuthCollaborator, UserIdentity
from ..schemas.cocktail import CocktailRead
from ..schemas.comment import CommentRead
from ..schemas.favorite import FavoriteStatus
from ..schemas.rating import RatingSummary
from .catalog_service import CatalogReader, CatalogView
from .mutation_gateway import Fields, MutationGateway
from .mutation_state import MutationState, affordance_key

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CatalogSession:
    """Cached catalog view plus the actions a viewer can take on it."""

    def __init__(
        self,
        reader: CatalogReader,
        gateway: MutationGateway,
        auth: Optional[AuthCollaborator] = None,
        viewer: Optional[UserIdentity] = None,
    ) -> None:
        self.reader = reader
        self.gateway = gateway
        self.viewer = viewer
        self.view = CatalogView()
        self.stale = True
        self.last_error: Optional[str] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        if auth is not None:
            self._unsubscribe = auth.on_auth_change(self._on_auth_change)

    @classmethod
    async def open(
        cls,
        reader: CatalogReader,
        gateway: MutationGateway,
        auth: AuthCollaborator,
    ) -> "CatalogSession":
        """Create a session for the auth collaborator's current user and load it."""
        viewer = await auth.current_user()
        session = cls(reader, gateway, auth=auth, viewer=viewer)
        await session.reload()
        return session

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_auth_change(self, user: Optional[UserIdentity]) -> None:
        previous = self.viewer.id if self.viewer else None
        current = user.id if user else None
        if previous == current:
            return
        logger.info("Viewer changed from %s to %s", previous, current)
        self.viewer = user
        # Favorites belong to the previous viewer; the rest of the view is
        # shared but the next reload will refresh it anyway.
        self.view.favorite_ids = set()
        self.stale = True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def reload(self) -> Optional[CatalogView]:
        """Load the full catalog for the current viewer.

        On failure the previous view is kept and ``None`` is returned.
        """
        try:
            view = await self.reader.load_catalog(self.viewer.id if self.viewer else None)
        except CatalogError as exc:
            logger.error("Catalog reload failed: %s", exc.message)
            self.last_error = exc.message
            return None
        self.view = view
        self.stale = False
        self.last_error = None
        return view

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def state(self, action: str, *target: object) -> MutationState:
        return self.gateway.tracker.state(self._key(action, *target))

    def failure(self, action: str, *target: object) -> Optional[str]:
        """Message of the last failed submission of an affordance, if any."""
        return self.gateway.tracker.failure_message(self._key(action, *target))

    def _key(self, action: str, *target: object) -> str:
        return affordance_key(action, *target, self.viewer.id if self.viewer else None)

    async def _run(self, call: Awaitable[T]) -> Optional[T]:
        try:
            result = await call
        except CatalogError as exc:
            self.last_error = exc.message
            return None
        self.last_error = None
        return result

    async def create_item(self, fields: Fields) -> Optional[CocktailRead]:
        created = await self._run(self.gateway.create_item(fields, self.viewer))
        if created is not None and await self.reload() is None:
            # The cocktail exists; only the refresh failed.  Show it now and
            # leave the rest for the next reload.
            logger.warning("Cocktail %s created but reload failed: %s", created.id, self.last_error)
            self.last_error = None
            self.stale = True
            if self.view.item(created.id) is None:
                self.view.items.append(created)
            self.view.rating_average.setdefault(created.id, 0.0)
            self.view.rating_count.setdefault(created.id, 0)
        return created

    async def update_item(self, cocktail_id: str, fields: Fields) -> Optional[CocktailRead]:
        updated = await self._run(self.gateway.update_item(cocktail_id, fields, self.viewer))
        if updated is not None:
            # Kept in place; a renamed cocktail moves on the next reload,
            # which sorts with the backend's collation.
            self.view.items = [updated if cocktail.id == updated.id else cocktail for cocktail in self.view.items]
        return updated

    async def delete_item(self, cocktail_id: str) -> bool:
        deleted = await self._run(self.gateway.delete_item(cocktail_id, self.viewer))
        if deleted is None:
            return False
        self.view.items = [cocktail for cocktail in self.view.items if cocktail.id != cocktail_id]
        self.view.rating_average.pop(cocktail_id, None)
        self.view.rating_count.pop(cocktail_id, None)
        self.view.favorite_ids.discard(cocktail_id)
        self.view.comments.pop(cocktail_id, None)
        return True

    async def rate(self, cocktail_id: str, score: int) -> Optional[RatingSummary]:
        summary = await self._run(self.gateway.set_rating(cocktail_id, self.viewer, score))
        if summary is not None:
            self.view.rating_average[cocktail_id] = summary.average
            self.view.rating_count[cocktail_id] = summary.count
        return summary

    async def toggle_favorite(self, cocktail_id: str) -> Optional[FavoriteStatus]:
        status = await self._run(self.gateway.toggle_favorite(cocktail_id, self.viewer))
        if status is not None:
            if status.is_favorite:
                self.view.favorite_ids.add(cocktail_id)
            else:
                self.view.favorite_ids.discard(cocktail_id)
        return status

    async def add_comment(self, cocktail_id: str, content: str) -> Optional[CommentRead]:
        comment = await self._run(self.gateway.add_comment(cocktail_id, self.viewer, content))
        if comment is not None:
            self.view.comments.setdefault(cocktail_id, []).append(comment)
        return comment
