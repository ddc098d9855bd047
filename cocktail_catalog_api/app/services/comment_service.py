"""Business logic for comments: append and list, nothing else."""

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List

from ..core.storage import Storage, eq
from ..schemas.comment import CommentRead

logger = logging.getLogger(__name__)

COMMENTS_TABLE = "comments"


class CommentService:
    """Service for cocktail comments."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    async def add_comment(self, cocktail_id: str, user_id: str, content: str) -> CommentRead:
        row = {
            "cocktail_id": cocktail_id,
            "user_id": user_id,
            "content": content,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        stored = await self.storage.insert(COMMENTS_TABLE, row)
        comment = CommentRead.model_validate(stored)
        logger.info("User %s commented on cocktail %s (comment %s)", user_id, cocktail_id, comment.id)
        return comment

    async def list_comments(self, cocktail_id: str) -> List[CommentRead]:
        """Return the comments of one cocktail, oldest first."""
        rows = await self.storage.select(COMMENTS_TABLE, [eq("cocktail_id", cocktail_id)], order_by="created_at")
        return [CommentRead.model_validate(row) for row in rows]

    async def comments_by_cocktail(self) -> Dict[str, List[CommentRead]]:
        """Return every comment grouped by cocktail id, oldest first."""
        rows = await self.storage.select(COMMENTS_TABLE, order_by="created_at")
        grouped: Dict[str, List[CommentRead]] = defaultdict(list)
        for row in rows:
            comment = CommentRead.model_validate(row)
            grouped[comment.cocktail_id].append(comment)
        return dict(grouped)
