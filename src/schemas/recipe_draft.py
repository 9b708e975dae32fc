"""Recipe draft schema for content-understanding output."""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.enums import Difficulty
from src.schemas.recipe import IngredientSchema

_LEADING_NUMBER = re.compile(r"\d+")


class RecipeDraft(BaseModel):
    """Structured recipe returned by the content-understanding service.

    Only title, ingredients and instructions are required; a draft that
    lacks any of them fails validation and cannot be persisted.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    ingredients: list[IngredientSchema] = Field(..., min_length=1)
    instructions: list[str] = Field(..., min_length=1)
    difficulty: Difficulty | None = None
    cooking_time: int | None = Field(None, alias="cookingTime", gt=0)
    step0_summary: str | None = Field(None, alias="step0Summary")
    thumbnail_url: str | None = Field(None, alias="thumbnailUrl")

    @field_validator("description", mode="before")
    @classmethod
    def empty_description(cls, value):
        return value or ""

    @field_validator("instructions", mode="before")
    @classmethod
    def flatten_instructions(cls, value):
        """Accept `[{"step": 1, "text": "..."}]` as well as plain strings."""
        if not isinstance(value, list):
            return value
        steps = []
        for entry in value:
            if isinstance(entry, dict):
                entry = entry.get("text") or entry.get("instruction") or ""
            if isinstance(entry, str) and entry.strip():
                steps.append(entry.strip())
        return steps

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalize_difficulty(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            return value if value in {d.value for d in Difficulty} else None
        return value

    @field_validator("cooking_time", mode="before")
    @classmethod
    def parse_cooking_time(cls, value):
        """Keep the leading number of answers like "25 minutes"."""
        if isinstance(value, str):
            match = _LEADING_NUMBER.search(value)
            return int(match.group()) if match else None
        if isinstance(value, int | float) and value <= 0:
            return None
        return value

    @field_validator("step0_summary", "thumbnail_url", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value
