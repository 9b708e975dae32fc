"""Celery tasks for recipe ingestion from video URLs."""

import asyncio
import logging

from src.celery_app import app as celery_app
from src.config import get_settings
from src.database import SessionLocal
from src.services.ingestion import IngestionService

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=0)
def process_recipe_submission(self, user_id: int, url: str) -> dict:
    """Build and store a recipe from a submitted video URL.

    Failures are logged and never surfaced to the submitter; nothing is
    written unless the recipe is complete.

    Args:
        user_id: ID of the submitting user
        url: Video URL as submitted

    Returns:
        dict with processing result
    """
    db = SessionLocal()
    try:
        logger.info(f"Processing recipe submission for user {user_id}: {url}")

        service = IngestionService(db)
        recipe = asyncio.run(service.ingest(user_id, url))
        recipe_id = recipe.id

        # The recipe is committed; a failed push must not undo that outcome
        try:
            service.notify_ready(recipe)
        except Exception as e:
            logger.warning(f"Ready notification for recipe {recipe_id} failed: {e}")
            db.rollback()

        if get_settings().precompute_steps_enabled:
            from src.tasks.step_preparation import compute_step_preparations

            compute_step_preparations.delay(recipe_id)

        logger.info(f"Recipe {recipe_id} ready for user {user_id}")

        return {"success": True, "recipe_id": recipe_id}

    except Exception as e:
        logger.error(
            f"Error processing recipe submission for user {user_id} ({url}): {e}",
            exc_info=True,
        )
        db.rollback()
        return {"error": str(e)}
    finally:
        db.close()
