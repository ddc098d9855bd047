"""
Mutation gateway.

Every user intent that changes remote state goes through here:
creating, updating and deleting cocktails, rating, toggling a
favorite and commenting.  The gateway is the validation boundary.
Malformed input raises ``ValidationError`` and missing sign-in raises
``AuthRequiredError``, in that order, before any call reaches the
backend; bad input is reported even for anonymous callers.  Each call
runs inside the submission state of its affordance (see
``mutation_state``) so repeated clicks on the same control are
rejected while the first one is in flight.

The acting user is always passed in explicitly; the gateway keeps no
session of its own.
"""

import logging
from typing import Any, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import AuthRequiredError, ValidationError, describe_validation_error
from ..core.security import UserIdentity
from ..core.storage import Storage
from ..schemas.cocktail import CocktailCreate, CocktailRead, CocktailUpdate
from ..schemas.comment import CommentCreate, CommentRead
from ..schemas.favorite import FavoriteStatus
from ..schemas.rating import RatingSet, RatingSummary
from .cocktail_service import CocktailService
from .comment_service import CommentService
from .favorite_service import FavoriteService
from .mutation_state import MutationTracker, affordance_key
from .rating_service import RatingService

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

Fields = Union[Mapping[str, Any], BaseModel]


def parse_input(model: Type[M], fields: Fields) -> M:
    """Validate ``fields`` against ``model``, raising the catalog ``ValidationError``."""
    if isinstance(fields, model):
        return fields
    if isinstance(fields, BaseModel):
        fields = fields.model_dump(exclude_unset=True)
    try:
        return model.model_validate(dict(fields))
    except PydanticValidationError as exc:
        raise ValidationError(describe_validation_error(exc)) from exc
    except (TypeError, ValueError) as exc:
        raise ValidationError(str(exc)) from exc


def require_user(user: Optional[UserIdentity], action: str) -> UserIdentity:
    if user is None:
        raise AuthRequiredError(f"Sign in to {action}")
    return user


def _user_key(user: Optional[UserIdentity]) -> Optional[str]:
    return user.id if user is not None else None


class MutationGateway:
    """Write side of the catalog."""

    def __init__(self, storage: Storage, tracker: Optional[MutationTracker] = None) -> None:
        self.tracker = tracker or MutationTracker()
        self.cocktails = CocktailService(storage)
        self.ratings = RatingService(storage)
        self.favorites = FavoriteService(storage)
        self.comments = CommentService(storage)

    async def create_item(self, fields: Fields, user: Optional[UserIdentity]) -> CocktailRead:
        """Create a cocktail owned by ``user``."""
        async with self.tracker.submit(affordance_key("create_item", _user_key(user))):
            data = parse_input(CocktailCreate, fields)
            acting = require_user(user, "add a cocktail")
            return await self.cocktails.create_cocktail(data, acting)

    async def update_item(self, cocktail_id: str, fields: Fields, user: Optional[UserIdentity]) -> CocktailRead:
        """Merge ``fields`` into the stored cocktail; only the owner may do this."""
        async with self.tracker.submit(affordance_key("update_item", cocktail_id, _user_key(user))):
            updates = parse_input(CocktailUpdate, fields)
            acting = require_user(user, "edit a cocktail")
            return await self.cocktails.update_cocktail(cocktail_id, updates, acting)

    async def delete_item(self, cocktail_id: str, user: Optional[UserIdentity]) -> bool:
        """Delete a cocktail; returns ``False`` when it was already gone."""
        async with self.tracker.submit(affordance_key("delete_item", cocktail_id, _user_key(user))):
            acting = require_user(user, "delete a cocktail")
            return await self.cocktails.delete_cocktail(cocktail_id, acting)

    async def set_rating(self, cocktail_id: str, user: Optional[UserIdentity], score: Any) -> RatingSummary:
        """Rate a cocktail and return its freshly recomputed average."""
        async with self.tracker.submit(affordance_key("set_rating", cocktail_id, _user_key(user))):
            rating = parse_input(RatingSet, {"score": score})
            acting = require_user(user, "rate a cocktail")
            await self.cocktails.get_cocktail(cocktail_id)
            return await self.ratings.set_rating(cocktail_id, acting.id, rating.score)

    async def toggle_favorite(self, cocktail_id: str, user: Optional[UserIdentity]) -> FavoriteStatus:
        """Add the cocktail to the user's favorites, or remove it if present."""
        async with self.tracker.submit(affordance_key("toggle_favorite", cocktail_id, _user_key(user))):
            acting = require_user(user, "manage favorites")
            await self.cocktails.get_cocktail(cocktail_id)
            is_favorite = await self.favorites.toggle(cocktail_id, acting.id)
            return FavoriteStatus(cocktail_id=cocktail_id, is_favorite=is_favorite)

    async def add_comment(self, cocktail_id: str, user: Optional[UserIdentity], content: Any) -> CommentRead:
        """Append a comment; the stored text is the trimmed ``content``."""
        async with self.tracker.submit(affordance_key("add_comment", cocktail_id, _user_key(user))):
            comment = parse_input(CommentCreate, {"content": content})
            acting = require_user(user, "comment")
            await self.cocktails.get_cocktail(cocktail_id)
            return await self.comments.add_comment(cocktail_id, acting.id, comment.content)
