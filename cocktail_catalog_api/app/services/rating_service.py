"""
Business logic for ratings.

Ratings live in the ``ratings`` table, keyed by ``(user_id,
cocktail_id)``.  Writes are upserts on that pair so a second rating
from the same user replaces the first.  Averages are never maintained
incrementally: they are recomputed from every stored score whenever
they are needed.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

from ..core.storage import Row, Storage, eq
from ..schemas.cocktail import coerce_id
from ..schemas.rating import RatingSummary

logger = logging.getLogger(__name__)

RATINGS_TABLE = "ratings"
RATING_CONFLICT_KEY = "user_id,cocktail_id"


def average_score(scores: Iterable[int]) -> float:
    """Unweighted arithmetic mean of ``scores``; ``0.0`` when there are none."""
    values = [int(score) for score in scores]
    if not values:
        return 0.0
    return sum(values) / len(values)


def summarize_ratings(rows: Iterable[Row]) -> Dict[str, Tuple[float, int]]:
    """Group raw rating rows by cocktail into ``(average, count)`` pairs."""
    scores: Dict[str, List[int]] = defaultdict(list)
    for row in rows:
        scores[str(coerce_id(row["cocktail_id"]))].append(int(row["score"]))
    return {cocktail_id: (average_score(values), len(values)) for cocktail_id, values in scores.items()}


class RatingService:
    """Service for cocktail ratings."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    async def set_rating(self, cocktail_id: str, user_id: str, score: int) -> RatingSummary:
        """Store ``score`` for the pair and return the recomputed summary."""
        await self.storage.upsert(
            RATINGS_TABLE,
            {"user_id": user_id, "cocktail_id": cocktail_id, "score": score},
            on_conflict=RATING_CONFLICT_KEY,
        )
        logger.info("User %s rated cocktail %s with %s", user_id, cocktail_id, score)
        return await self.summary(cocktail_id)

    async def summary(self, cocktail_id: str) -> RatingSummary:
        rows = await self.storage.select(RATINGS_TABLE, [eq("cocktail_id", cocktail_id)])
        average, count = summarize_ratings(rows).get(str(cocktail_id), (0.0, 0))
        return RatingSummary(cocktail_id=str(cocktail_id), average=average, count=count)

    async def summaries(self) -> Dict[str, Tuple[float, int]]:
        """Return ``(average, count)`` for every cocktail that has ratings."""
        rows = await self.storage.select(RATINGS_TABLE)
        return summarize_ratings(rows)
