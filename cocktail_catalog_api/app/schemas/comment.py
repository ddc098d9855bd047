"""
Pydantic schemas for cocktail comments.

Comments are append-only: there is a schema for posting one and one
for reading them back, but nothing for edits.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .cocktail import coerce_id


class CommentCreate(BaseModel):
    """Schema for posting a comment."""

    content: str = Field(..., description="Comment text")

    @field_validator("content")
    @classmethod
    def sanitize_content(cls, v: str) -> str:
        """Trim whitespace, reject empty comments and enforce a maximum length."""
        v = v.strip()
        if not v:
            raise ValueError("Comment must not be empty")
        if len(v) > 1000:
            raise ValueError("Comment must be 1000 characters or fewer")
        return v


class CommentRead(BaseModel):
    """Schema for reading a comment from the API."""

    id: str
    cocktail_id: str
    user_id: str
    content: str
    created_at: datetime

    @field_validator("id", "cocktail_id", "user_id", mode="before")
    @classmethod
    def stringify_ids(cls, v: Any) -> Any:
        return coerce_id(v)
