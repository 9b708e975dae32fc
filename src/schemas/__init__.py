"""Pydantic schemas for API requests and responses."""

from src.schemas.auth import UserResponse
from src.schemas.device import DeviceRegister, DeviceResponse
from src.schemas.recipe import (
    FavoriteUpdate,
    IngredientSchema,
    RecipeResponse,
    RecipeSubmission,
    SubmissionAccepted,
)
from src.schemas.recipe_draft import RecipeDraft
from src.schemas.recipe_version import (
    RecipeVersionResponse,
    RemixSave,
    VersionListResponse,
    VersionSaveResponse,
)

__all__ = [
    "UserResponse",
    "DeviceRegister",
    "DeviceResponse",
    "IngredientSchema",
    "RecipeDraft",
    "RecipeSubmission",
    "SubmissionAccepted",
    "RecipeResponse",
    "FavoriteUpdate",
    "RemixSave",
    "RecipeVersionResponse",
    "VersionListResponse",
    "VersionSaveResponse",
]
