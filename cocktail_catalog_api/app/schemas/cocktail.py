"""
Pydantic models for cocktail records.

``CocktailBase`` holds the shared fields; ``CocktailCreate`` is the
request body for new cocktails and ``CocktailRead`` adds the server
assigned ``id`` and the owner.  ``CocktailUpdate`` makes every field
optional: only the fields a client sends are merged into the stored
record.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


def split_ingredients(value: Any) -> Any:
    """Accept ingredients as a list or a comma separated string.

    Entries are trimmed and empty ones dropped, the way the add form
    of the web client has always sent them.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if isinstance(value, (list, tuple)):
        return [str(part).strip() for part in value if str(part).strip()]
    return value


def coerce_id(value: Any) -> Any:
    """Identifiers are opaque; numeric keys from the backend become strings."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(int(value))
    return value


class CocktailBase(BaseModel):
    name: str = Field(..., min_length=1, examples=["Mojito"])
    description: Optional[str] = Field(None, examples=["Rum, lime and mint over crushed ice"])
    ingredients: List[str] = Field(default_factory=list, examples=[["Rum", "Lime", "Mint"]])
    price: float = Field(..., ge=0, examples=[8.5])
    image_url: Optional[str] = Field(None, examples=["https://example.com/mojito.jpg"])

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("ingredients", mode="before")
    @classmethod
    def normalise_ingredients(cls, v: Any) -> Any:
        return split_ingredients(v)


class CocktailCreate(CocktailBase):
    """Schema for creating a cocktail."""
    pass


class CocktailRead(CocktailBase):
    """Schema for reading a cocktail from the API."""

    id: str
    user_id: Optional[str] = None

    # Stored rows may predate the validation rules (for instance an
    # empty name written directly in the dashboard); reading them must
    # not fail.
    name: str
    price: float = 0.0

    model_config = {
        "from_attributes": True,
    }

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def stringify_ids(cls, v: Any) -> Any:
        return coerce_id(v)

    @field_validator("description", "image_url", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class CocktailUpdate(BaseModel):
    """Schema for updating a cocktail.

    All fields are optional; only provided fields will be updated.
    """

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    ingredients: Optional[List[str]] = None
    price: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("ingredients", mode="before")
    @classmethod
    def normalise_ingredients(cls, v: Any) -> Any:
        if v is None:
            return None
        return split_ingredients(v)


class CocktailFilters(BaseModel):
    """Optional search filters for the cocktail list."""

    query: Optional[str] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    ingredient: Optional[str] = None
