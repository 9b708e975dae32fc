"""Recipe service for the feed, remixes and the version history."""

import logging
import time

import httpx
from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.config import get_settings
from src.models.recipe import Recipe
from src.models.recipe_version import RecipeVersion
from src.schemas.recipe_draft import RecipeDraft
from src.schemas.recipe_version import RemixSave
from src.services.content_understanding import ContentUnderstandingService

logger = logging.getLogger(__name__)

ORIGINAL_VERSION_TITLE = "Original"


def _remix_fields(remix: RemixSave) -> dict:
    """Column values shared by a version row and the recipe it mirrors."""
    return {
        "title": remix.title,
        "description": remix.description,
        "ingredients": [ingredient.model_dump() for ingredient in remix.ingredients],
        "instructions": list(remix.instructions),
        "chefs_note": remix.chefs_note,
        "step0_summary": remix.step0_summary,
        "step0_audio_url": str(remix.step0_audio_url) if remix.step0_audio_url else None,
        "difficulty": remix.difficulty.value if remix.difficulty else None,
        "cooking_time": remix.cooking_time,
    }


class RecipeService:
    """Service for recipe-related operations."""

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()

    def get_feed(self, user_id: int) -> list[Recipe]:
        """All recipes of a user, newest first."""
        return (
            self.db.query(Recipe)
            .filter(Recipe.user_id == user_id)
            .order_by(Recipe.created_at.desc(), Recipe.id.desc())
            .all()
        )

    def get_recipe(self, recipe_id: int, user_id: int) -> Recipe:
        """Get a recipe owned by the user or raise 404."""
        recipe = (
            self.db.query(Recipe)
            .filter(Recipe.id == recipe_id, Recipe.user_id == user_id)
            .first()
        )
        if not recipe:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Recipe not found",
            )
        return recipe

    def set_favorite(self, recipe_id: int, user_id: int, is_favorite: bool) -> Recipe:
        recipe = self.get_recipe(recipe_id, user_id)
        recipe.is_favorite = is_favorite
        self.db.commit()
        self.db.refresh(recipe)
        return recipe

    def delete_recipe(self, recipe_id: int, user_id: int) -> None:
        """Delete a recipe together with its version history."""
        recipe = self.get_recipe(recipe_id, user_id)
        self.db.delete(recipe)
        self.db.commit()
        logger.info(f"Deleted recipe {recipe_id} for user {user_id}")

    def list_versions(self, recipe_id: int, user_id: int) -> list[RecipeVersion]:
        """Version history of a recipe, most recent first."""
        self.get_recipe(recipe_id, user_id)
        return (
            self.db.query(RecipeVersion)
            .filter(RecipeVersion.recipe_id == recipe_id)
            .order_by(RecipeVersion.version_number.desc())
            .all()
        )

    def save_version(self, recipe_id: int, user_id: int, remix: RemixSave) -> RecipeVersion:
        """
        Store a remix as the next version of a recipe.

        The first remix also snapshots the recipe as it was as version 1
        ("Original"). The recipe row is updated to mirror the remix in the
        same transaction. Concurrent saves that pick the same number are
        retried with a growing delay before giving up with 409.
        """
        max_attempts = self.settings.max_version_retries
        for attempt in range(1, max_attempts + 1):
            try:
                return self._write_version(recipe_id, user_id, remix)
            except IntegrityError as e:
                self.db.rollback()
                logger.warning(
                    f"Version number conflict on recipe {recipe_id} "
                    f"(attempt {attempt}/{max_attempts}): {e.orig}"
                )
                if attempt < max_attempts:
                    time.sleep(self.settings.version_retry_delay_seconds * attempt)

        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Recipe was modified concurrently, please retry",
        )

    async def propose_remix(
        self,
        recipe_id: int,
        user_id: int,
        request: str,
        content_service: ContentUnderstandingService,
    ) -> RemixSave:
        """
        Ask the model for a remix of a recipe. Nothing is stored.

        The proposal carries no step-zero pair; the client narrates it and
        sends it back through save_version or fork_recipe.
        """
        recipe = self.get_recipe(recipe_id, user_id)
        original = {
            "title": recipe.title,
            "description": recipe.description or "",
            "ingredients": recipe.ingredients or [],
            "instructions": recipe.instructions or [],
            "chefsNote": recipe.chefs_note,
            "difficulty": recipe.difficulty,
            "cookingTime": recipe.cooking_time,
        }

        try:
            raw = await content_service.remix_recipe(original, request)
            draft = RecipeDraft.model_validate(raw)
            changed = raw.get("changedIngredients") or []
            proposal = RemixSave(
                title=draft.title,
                description=draft.description or recipe.description,
                ingredients=draft.ingredients,
                instructions=draft.instructions,
                chefs_note=raw.get("chefsNote") or None,
                changed_ingredients=[name for name in changed if isinstance(name, str)],
                difficulty=draft.difficulty or recipe.difficulty,
                cooking_time=draft.cooking_time or recipe.cooking_time,
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Remix of recipe {recipe_id} failed: {e}")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Could not remix recipe, please try again",
            ) from e

        logger.info(f"Proposed remix '{proposal.title}' of recipe {recipe_id}")
        return proposal

    def fork_recipe(self, recipe_id: int, user_id: int, remix: RemixSave) -> Recipe:
        """Store a remix as a new recipe derived from an existing one.

        The parent keeps its content and version history. The fork reuses the
        parent's provenance and embedding and starts unversioned.
        """
        parent = self.get_recipe(recipe_id, user_id)
        fork = Recipe(
            user_id=user_id,
            parent_recipe_id=parent.id,
            thumbnail_url=parent.thumbnail_url,
            source_url=parent.source_url,
            creator_username=parent.creator_username,
            embedding=list(parent.embedding),
            is_favorite=False,
            **_remix_fields(remix),
        )
        self.db.add(fork)
        self.db.commit()
        self.db.refresh(fork)

        logger.info(f"Forked recipe {parent.id} into {fork.id} for user {user_id}")
        return fork

    def _write_version(self, recipe_id: int, user_id: int, remix: RemixSave) -> RecipeVersion:
        recipe = (
            self.db.query(Recipe)
            .filter(Recipe.id == recipe_id, Recipe.user_id == user_id)
            .with_for_update()
            .first()
        )
        if not recipe:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Recipe not found",
            )

        latest = self._latest_version_number(recipe.id)
        if latest == 0:
            self.db.add(self._snapshot_original(recipe))
            latest = 1

        fields = _remix_fields(remix)
        version = RecipeVersion(
            recipe_id=recipe.id,
            version_number=latest + 1,
            changed_ingredients=list(remix.changed_ingredients),
            **fields,
        )
        self.db.add(version)

        for name, value in fields.items():
            setattr(recipe, name, value)

        self.db.commit()
        self.db.refresh(version)

        logger.info(f"Saved version {version.version_number} of recipe {recipe_id}")
        return version

    def _latest_version_number(self, recipe_id: int) -> int:
        latest = (
            self.db.query(func.max(RecipeVersion.version_number))
            .filter(RecipeVersion.recipe_id == recipe_id)
            .scalar()
        )
        return latest or 0

    def _snapshot_original(self, recipe: Recipe) -> RecipeVersion:
        """Version 1: the recipe exactly as it was ingested."""
        snapshot = RecipeVersion(
            recipe_id=recipe.id,
            version_number=1,
            title=ORIGINAL_VERSION_TITLE,
            description=recipe.description,
            ingredients=list(recipe.ingredients or []),
            instructions=list(recipe.instructions or []),
            chefs_note=recipe.chefs_note,
            changed_ingredients=[],
            step0_summary=recipe.step0_summary,
            step0_audio_url=recipe.step0_audio_url,
            difficulty=recipe.difficulty,
            cooking_time=recipe.cooking_time,
        )
        if recipe.created_at is not None:
            snapshot.created_at = recipe.created_at
        return snapshot
