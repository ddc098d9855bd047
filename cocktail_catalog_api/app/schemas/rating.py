"""
Pydantic schemas for cocktail ratings.

A user holds at most one rating per cocktail; writing again replaces
the previous score.  Averages are always recomputed from the full set
of stored scores and returned as a ``RatingSummary``.
"""

from pydantic import BaseModel, Field


class RatingSet(BaseModel):
    """Schema for rating a cocktail."""

    score: int = Field(..., ge=1, le=5, description="Rating from 1 to 5")


class RatingSummary(BaseModel):
    """Average score and number of raters for one cocktail."""

    cocktail_id: str
    average: float = 0.0
    count: int = 0
