"""Content extractor turning a video URL or file into a validated recipe draft."""

import asyncio
import logging
from pathlib import Path

from pydantic import ValidationError

from src.schemas.recipe_draft import RecipeDraft
from src.services.content_understanding import ContentUnderstandingService
from src.services.errors import ContentExtractionError

logger = logging.getLogger(__name__)


class ContentExtractor:
    """Stateless wrapper around the content-understanding service."""

    def __init__(self, content_service: ContentUnderstandingService | None = None) -> None:
        self.content_service = content_service or ContentUnderstandingService()

    async def extract(
        self,
        source: str | Path,
        mime_type: str | None = None,
        auxiliary_description: str | None = None,
    ) -> RecipeDraft:
        """Extract a recipe draft.

        Args:
            source: Remote URL (sent by reference) or a local media file
                (sent as raw bytes)
            mime_type: MIME type of the media, defaults to video/mp4
            auxiliary_description: Platform caption appended as extra context

        Returns:
            A draft with a title, at least one ingredient and one instruction

        Raises:
            ContentExtractionError: if the service fails or the draft is unusable
        """
        media: str | bytes
        if isinstance(source, Path):
            media = await asyncio.to_thread(source.read_bytes)
        else:
            media = source

        try:
            raw = await self.content_service.understand(
                media, mime_type=mime_type, auxiliary_text=auxiliary_description
            )
        except Exception as e:
            raise ContentExtractionError(f"Content understanding failed: {e}") from e

        try:
            draft = RecipeDraft.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Rejected recipe draft: {e}")
            raise ContentExtractionError(
                f"Recipe draft failed validation ({e.error_count()} errors)"
            ) from e

        logger.info(
            f"Extracted draft '{draft.title}' with {len(draft.ingredients)} ingredients "
            f"and {len(draft.instructions)} steps"
        )
        return draft
