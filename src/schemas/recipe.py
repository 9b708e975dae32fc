"""Recipe schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

# --- Ingredient ---


class IngredientSchema(BaseModel):
    """One ingredient line of a recipe."""

    name: str = Field(..., min_length=1, max_length=255)
    amount: str | None = Field(None, max_length=100)
    unit: str | None = Field(None, max_length=50)

    @field_validator("amount", "unit", mode="before")
    @classmethod
    def stringify_numbers(cls, value):
        """Models often answer `"amount": 2` instead of `"2"`."""
        if isinstance(value, int | float):
            return str(value)
        return value


# --- Submission ---


class RecipeSubmission(BaseModel):
    """Request to turn a social-media video URL into a recipe."""

    url: HttpUrl


class SubmissionAccepted(BaseModel):
    """Acknowledgement returned before ingestion runs."""

    success: bool = True
    message: str = "Processing started"


# --- Recipe ---


class RecipeResponse(BaseModel):
    """Recipe response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    description: str | None
    ingredients: list[IngredientSchema]
    instructions: list[str]
    thumbnail_url: str | None
    source_url: str | None
    creator_username: str | None
    step0_summary: str | None
    step0_audio_url: str | None
    step_preparations: list[dict] | None
    chefs_note: str | None
    difficulty: str | None
    cooking_time: int | None
    is_favorite: bool
    parent_recipe_id: int | None
    created_at: datetime
    updated_at: datetime


class FavoriteUpdate(BaseModel):
    """Request to mark or unmark a recipe as favorite."""

    model_config = ConfigDict(populate_by_name=True)

    is_favorite: bool = Field(..., alias="isFavorite")
