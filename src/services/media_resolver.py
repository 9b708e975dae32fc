"""Media resolver choosing between direct and download-then-analyze extraction."""

import asyncio
import logging
import tempfile
import threading
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from urllib.parse import urlparse

from src.config import get_settings
from src.schemas.recipe_draft import RecipeDraft
from src.services.content_extractor import ContentExtractor
from src.services.errors import IngestionError, MediaDownloadError
from src.services.video_retrieval import VideoRetrievalService

logger = logging.getLogger(__name__)


class ResolutionMode(str, Enum):
    """How a submitted URL is turned into a recipe draft."""

    DIRECT = "direct"
    DOWNLOAD = "download"


@dataclass
class ResolvedMedia:
    """Draft plus whatever the platform told us about the post."""

    mode: ResolutionMode
    draft: RecipeDraft
    description: str | None = None
    thumbnail_ref: str | None = None
    attribution: str | None = None


def select_strategy(url: str, direct_domains: list[str] | None = None) -> ResolutionMode:
    """Pick DIRECT for allow-listed platform hosts (and their subdomains)."""
    if direct_domains is None:
        direct_domains = get_settings().direct_url_domains
    host = (urlparse(url).hostname or "").lower()
    for domain in direct_domains:
        domain = domain.lower()
        if host == domain or host.endswith(f".{domain}"):
            return ResolutionMode.DIRECT
    return ResolutionMode.DOWNLOAD


def strategy_chain(url: str, direct_domains: list[str] | None = None) -> list[ResolutionMode]:
    """Ordered strategies to try; the fallback only ever goes direct -> download."""
    if select_strategy(url, direct_domains) is ResolutionMode.DIRECT:
        return [ResolutionMode.DIRECT, ResolutionMode.DOWNLOAD]
    return [ResolutionMode.DOWNLOAD]


class MediaResolver:
    """Resolves a submitted URL into a recipe draft and platform metadata."""

    def __init__(
        self,
        extractor: ContentExtractor | None = None,
        retrieval: VideoRetrievalService | None = None,
    ) -> None:
        self.settings = get_settings()
        self.extractor = extractor or ContentExtractor()
        self.retrieval = retrieval or VideoRetrievalService()
        self._strategies: dict[ResolutionMode, Callable[[str], Awaitable[ResolvedMedia]]] = {
            ResolutionMode.DIRECT: self._resolve_direct,
            ResolutionMode.DOWNLOAD: self._resolve_downloaded,
        }

    async def resolve(self, url: str) -> ResolvedMedia:
        """Run the strategy chain for a URL.

        Every strategy but the last may fail and hand over to the next one;
        a failure of the last strategy propagates.
        """
        chain = strategy_chain(url, self.settings.direct_url_domains)
        for mode in chain[:-1]:
            try:
                return await self._strategies[mode](url)
            except IngestionError as e:
                logger.info(f"{mode.value} extraction failed for {url}, falling back: {e}")
        return await self._strategies[chain[-1]](url)

    async def _resolve_direct(self, url: str) -> ResolvedMedia:
        draft = await self.extractor.extract(url)
        return ResolvedMedia(
            mode=ResolutionMode.DIRECT,
            draft=draft,
            thumbnail_ref=draft.thumbnail_url,
        )

    async def _resolve_downloaded(self, url: str) -> ResolvedMedia:
        # The directory and the video inside it are gone once this block exits
        with tempfile.TemporaryDirectory(
            prefix="clipcook_", dir=self.settings.download_dir, ignore_cleanup_errors=True
        ) as tmp:
            cancel = threading.Event()
            download = asyncio.ensure_future(
                asyncio.to_thread(self.retrieval.fetch_media, url, Path(tmp), cancel)
            )
            try:
                media = await asyncio.wait_for(
                    asyncio.shield(download),
                    timeout=self.settings.download_timeout_seconds,
                )
            except TimeoutError as e:
                raise MediaDownloadError(
                    f"Download of {url} timed out after {self.settings.download_timeout_seconds}s"
                ) from e
            finally:
                # The worker thread must stop writing into tmp before it is removed
                if not download.done():
                    cancel.set()
                    await asyncio.gather(download, return_exceptions=True)

            draft = await self.extractor.extract(
                media.file_path,
                mime_type=media.mime_type,
                auxiliary_description=media.description,
            )

        return ResolvedMedia(
            mode=ResolutionMode.DOWNLOAD,
            draft=draft,
            description=media.description,
            thumbnail_ref=media.thumbnail_url or draft.thumbnail_url,
            attribution=media.creator_username,
        )
