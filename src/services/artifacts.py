"""Artifact pipeline turning a recipe draft into durable artifacts."""

import asyncio
import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

import httpx

from src.config import get_settings
from src.schemas.recipe_draft import RecipeDraft
from src.services.content_understanding import ContentUnderstandingService
from src.services.errors import EmbeddingError
from src.services.storage import StorageService
from src.services.video_retrieval import VideoRetrievalService

logger = logging.getLogger(__name__)


@dataclass
class RecipeArtifacts:
    """Artifacts ready to be written on the Recipe row."""

    thumbnail_url: str | None
    embedding: list[float]
    step0_summary: str | None = None
    step0_audio_url: str | None = None


def build_embedding_text(draft: RecipeDraft, auxiliary_description: str | None = None) -> str:
    """Text fingerprint of a recipe: title, descriptions and ingredient names."""
    parts = [
        draft.title,
        draft.description,
        auxiliary_description or "",
        " ".join(ingredient.name for ingredient in draft.ingredients),
    ]
    return " ".join(part for part in parts if part)


class ArtifactPipeline:
    """Produces the embedding, durable thumbnail and step-zero narration."""

    def __init__(
        self,
        content_service: ContentUnderstandingService | None = None,
        storage: StorageService | None = None,
        retrieval: VideoRetrievalService | None = None,
    ) -> None:
        self.settings = get_settings()
        self.content_service = content_service or ContentUnderstandingService()
        self.storage = storage or StorageService()
        self.retrieval = retrieval or VideoRetrievalService()

    async def persist_thumbnail(self, thumbnail_ref: str | None) -> str | None:
        """Re-host a third-party thumbnail in durable storage.

        Durable URLs are returned untouched. On any failure the original
        reference is kept.
        """
        if not thumbnail_ref or self.storage.is_durable_url(thumbnail_ref):
            return thumbnail_ref

        name = f"thumb_{uuid4()}.jpg"
        try:
            with tempfile.TemporaryDirectory(
                prefix="clipcook_thumb_", dir=self.settings.download_dir
            ) as tmp:
                local_path = await asyncio.to_thread(
                    self.retrieval.fetch_thumbnail, thumbnail_ref, Path(tmp)
                )
                data = local_path.read_bytes()
            return await asyncio.to_thread(
                self.storage.upload, self.storage.default_bucket, name, data, "image/jpeg"
            )
        except Exception as e:
            logger.warning(f"Keeping original thumbnail {thumbnail_ref}, re-hosting failed: {e}")
            return thumbnail_ref

    async def generate_embedding(
        self, draft: RecipeDraft, auxiliary_description: str | None = None
    ) -> list[float]:
        """Embed the recipe fingerprint.

        Raises:
            EmbeddingError: if no vector could be obtained
        """
        text = build_embedding_text(draft, auxiliary_description)
        try:
            embedding = await self.content_service.embed(text)
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            raise EmbeddingError(f"Embedding generation failed: {e}") from e
        if not embedding:
            raise EmbeddingError("Embedding service returned an empty vector")
        return embedding

    async def synthesize_step0_audio(self, summary: str) -> str | None:
        """Narrate the step-zero summary and store it; None on failure."""
        try:
            audio = await self.content_service.synthesize_speech(summary)
            return await asyncio.to_thread(
                self.storage.upload,
                self.storage.default_bucket,
                f"audio_{uuid4()}.mp3",
                audio,
                "audio/mpeg",
            )
        except Exception as e:
            logger.warning(f"Step-zero narration failed, dropping summary: {e}")
            return None

    async def run(
        self,
        draft: RecipeDraft,
        auxiliary_description: str | None = None,
        thumbnail_ref: str | None = None,
    ) -> RecipeArtifacts:
        """Build every artifact for a draft.

        Only the embedding is required; the summary is kept only when its
        narration was stored.
        """
        embedding = await self.generate_embedding(draft, auxiliary_description)
        thumbnail_url = await self.persist_thumbnail(thumbnail_ref or draft.thumbnail_url)

        step0_summary = None
        step0_audio_url = None
        if draft.step0_summary:
            step0_audio_url = await self.synthesize_step0_audio(draft.step0_summary)
            if step0_audio_url:
                step0_summary = draft.step0_summary

        return RecipeArtifacts(
            thumbnail_url=thumbnail_url,
            embedding=embedding,
            step0_summary=step0_summary,
            step0_audio_url=step0_audio_url,
        )
