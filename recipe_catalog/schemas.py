from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Difficulty(str, Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class IngredientIn(BaseModel):
    # amounts such as 2.25 may arrive as JSON numbers; they are kept as text
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: Optional[str] = None
    name: str = Field("", json_schema_extra={"example": "all-purpose flour"})
    amount: str = Field("", json_schema_extra={"example": "1/4"})
    unit: str = Field("", json_schema_extra={"example": "cup"})
    order: int = 0


class Ingredient(IngredientIn):
    id: str


def _whole_number(value) -> Optional[int]:
    # anything that is not a non-negative whole number falls back to the default
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


class RecipeIn(BaseModel):
    """Request body for create and update.

    Every field is optional here: create checks the title itself so a
    missing title maps to a 400, and update only applies what was sent.
    Counts, rating and difficulty outside their range are read as unset
    rather than rejected, so the create defaults and the update merge
    decide what gets stored.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(
        None, json_schema_extra={"example": "Classic Chocolate Chip Cookies"}
    )
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    prep_time: Optional[int] = Field(None, alias="prepTime")
    cook_time: Optional[int] = Field(None, alias="cookTime")
    servings: Optional[int] = None
    difficulty: Optional[Difficulty] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    # 0 is accepted and means "no rating"
    rating: Optional[int] = None
    ingredients: Optional[List[IngredientIn]] = Field(
        None,
        json_schema_extra={
            "example": [
                {"name": "butter", "amount": "1", "unit": "cup", "order": 1}
            ]
        },
    )
    instructions: Optional[List[str]] = Field(
        None,
        json_schema_extra={
            "example": ["Mix butter and sugars", "Bake 9-11 minutes"]
        },
    )
    notes: Optional[str] = None
    is_favorite: Optional[bool] = Field(None, alias="isFavorite")

    @field_validator("prep_time", "cook_time", "servings", mode="before")
    @classmethod
    def _counts(cls, value):
        return _whole_number(value)

    @field_validator("rating", mode="before")
    @classmethod
    def _rating(cls, value):
        rating = _whole_number(value)
        return rating if rating is not None and rating <= 5 else None

    @field_validator("difficulty", mode="before")
    @classmethod
    def _difficulty(cls, value):
        try:
            return Difficulty(value)
        except (TypeError, ValueError):
            return None


class RecipeCreate(RecipeIn):
    pass


class RecipeUpdate(RecipeIn):
    pass


class Recipe(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    prep_time: int = Field(0, alias="prepTime", ge=0)
    cook_time: int = Field(0, alias="cookTime", ge=0)
    servings: int = Field(1, ge=1)
    difficulty: Difficulty = Difficulty.easy
    category: str = "lunch"
    tags: List[str] = Field(default_factory=list)
    rating: Optional[int] = Field(None, ge=1, le=5)
    ingredients: List[Ingredient] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    is_favorite: bool = Field(False, alias="isFavorite")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class Message(BaseModel):
    message: str
