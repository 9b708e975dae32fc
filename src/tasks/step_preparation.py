"""Celery tasks for background step preparation."""

import asyncio
import logging

from src.celery_app import app as celery_app
from src.database import SessionLocal
from src.models.recipe import Recipe
from src.services.content_understanding import ContentUnderstandingService

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=0)
def compute_step_preparations(self, recipe_id: int) -> dict:
    """Precompute a preparation guide for every instruction of a recipe.

    Best effort: the recipe is already usable without it.
    """
    db = SessionLocal()
    try:
        recipe = db.query(Recipe).filter(Recipe.id == recipe_id).first()
        if not recipe:
            return {"error": "Recipe not found"}

        content_service = ContentUnderstandingService()
        if not content_service.is_configured:
            logger.warning("Content service not configured, skipping step preparation")
            return {"skipped": True}

        preparations = asyncio.run(
            content_service.prepare_steps(
                recipe.title,
                list(recipe.ingredients or []),
                list(recipe.instructions or []),
            )
        )

        recipe.step_preparations = preparations
        db.commit()

        logger.info(f"Prepared {len(preparations)} steps for recipe {recipe_id}")

        return {"success": True, "steps": len(preparations)}

    except Exception as e:
        logger.error(f"Error preparing steps for recipe {recipe_id}: {e}", exc_info=True)
        db.rollback()
        return {"error": str(e)}
    finally:
        db.close()
