"""Ingestion orchestrator: from a submitted URL to a stored recipe."""

import logging

from sqlalchemy.orm import Session

from src.models import Recipe
from src.services.artifacts import ArtifactPipeline
from src.services.media_resolver import MediaResolver
from src.services.notification_service import PushNotificationService

logger = logging.getLogger(__name__)

READY_TITLE = "Recipe Ready! 🍳"


class IngestionService:
    """Resolves, enriches and stores one submitted recipe URL."""

    def __init__(
        self,
        db: Session,
        resolver: MediaResolver | None = None,
        artifacts: ArtifactPipeline | None = None,
        notifier: PushNotificationService | None = None,
    ) -> None:
        self.db = db
        self.resolver = resolver or MediaResolver()
        self.artifacts = artifacts or ArtifactPipeline()
        self.notifier = notifier or PushNotificationService()

    async def ingest(self, user_id: int, url: str) -> Recipe:
        """
        Turn a URL into a stored recipe.

        The recipe row is written in one commit, after every required
        artifact exists. Any IngestionError leaves the database untouched.
        """
        resolved = await self.resolver.resolve(url)
        draft = resolved.draft
        logger.info(f"Resolved {url} via {resolved.mode.value}: {draft.title!r}")

        artifacts = await self.artifacts.run(
            draft,
            resolved.description,
            thumbnail_ref=resolved.thumbnail_ref,
        )

        recipe = Recipe(
            user_id=user_id,
            title=draft.title,
            description=draft.description,
            ingredients=[ingredient.model_dump() for ingredient in draft.ingredients],
            instructions=list(draft.instructions),
            thumbnail_url=artifacts.thumbnail_url,
            source_url=url,
            creator_username=resolved.attribution,
            embedding=artifacts.embedding,
            step0_summary=artifacts.step0_summary,
            step0_audio_url=artifacts.step0_audio_url,
            difficulty=draft.difficulty.value if draft.difficulty else None,
            cooking_time=draft.cooking_time,
        )
        self.db.add(recipe)
        self.db.commit()
        self.db.refresh(recipe)

        logger.info(f"Stored recipe {recipe.id} for user {user_id} from {url}")
        return recipe

    def notify_ready(self, recipe: Recipe) -> int:
        """Tell the owner's devices that the recipe is ready."""
        return self.notifier.notify_user(
            self.db,
            recipe.user_id,
            READY_TITLE,
            f'"{recipe.title}" is ready to cook.',
            recipe_id=recipe.id,
        )
