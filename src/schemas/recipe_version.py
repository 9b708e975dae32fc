"""Recipe version (remix history) schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, model_validator

from src.models.enums import Difficulty
from src.schemas.recipe import IngredientSchema


class RemixSave(BaseModel):
    """Remix content to be stored as the next version of a recipe.

    Field names follow the mobile client (camelCase) but snake_case is
    accepted as well.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=1000)
    ingredients: list[IngredientSchema] = Field(..., min_length=1)
    instructions: list[str] = Field(..., min_length=1)
    chefs_note: str | None = Field(None, max_length=500, alias="chefsNote")
    changed_ingredients: list[str] = Field(default_factory=list, alias="changedIngredients")
    step0_summary: str | None = Field(None, max_length=500, alias="step0Summary")
    step0_audio_url: HttpUrl | None = Field(None, alias="step0AudioUrl")
    difficulty: Difficulty | None = None
    cooking_time: int | None = Field(None, gt=0, alias="cookingTime")

    @model_validator(mode="after")
    def check_step0_pair(self) -> "RemixSave":
        """A step-zero summary and its audio must be sent together."""
        if (self.step0_summary is None) != (self.step0_audio_url is None):
            raise ValueError("step0Summary and step0AudioUrl must be provided together")
        return self


class RecipeVersionResponse(BaseModel):
    """One entry of a recipe's version history."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    recipe_id: int
    version_number: int
    title: str
    description: str | None
    ingredients: list[IngredientSchema]
    instructions: list[str]
    chefs_note: str | None
    changed_ingredients: list[str]
    step0_summary: str | None
    step0_audio_url: str | None
    difficulty: str | None
    cooking_time: int | None
    created_at: datetime


class VersionListResponse(BaseModel):
    """Version history, most recent remix first."""

    success: bool = True
    versions: list[RecipeVersionResponse]


class VersionSaveResponse(BaseModel):
    """Result of saving a remix."""

    success: bool = True
    version: RecipeVersionResponse


class RemixRequest(BaseModel):
    """Free-text change a user wants applied to a recipe."""

    model_config = ConfigDict(str_strip_whitespace=True)

    prompt: str = Field(..., min_length=1, max_length=500)


class RemixProposalResponse(BaseModel):
    """A model-proposed remix, not yet stored."""

    success: bool = True
    remix: RemixSave
