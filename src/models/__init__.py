"""SQLAlchemy models."""

from src.models.recipe import Recipe
from src.models.recipe_version import RecipeVersion
from src.models.user import User
from src.models.user_device import UserDevice

__all__ = [
    "User",
    "UserDevice",
    "Recipe",
    "RecipeVersion",
]
