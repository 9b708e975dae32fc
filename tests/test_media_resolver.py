"""Tests for the media resolver strategy chain."""

import threading
import time
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.schemas.recipe_draft import RecipeDraft
from src.services.content_extractor import ContentExtractor
from src.services.errors import ContentExtractionError, MediaDownloadError
from src.services.media_resolver import (
    MediaResolver,
    ResolutionMode,
    select_strategy,
    strategy_chain,
)
from src.services.video_retrieval import DownloadedMedia

DIRECT_DOMAINS = ["youtube.com", "youtu.be", "instagram.com", "tiktok.com"]


def make_draft(**overrides) -> RecipeDraft:
    fields = {
        "title": "Garlic Noodles",
        "ingredients": [{"name": "noodles"}, {"name": "garlic"}],
        "instructions": ["Boil noodles", "Fry garlic"],
    }
    fields.update(overrides)
    return RecipeDraft(**fields)


def make_retrieval(seen_dirs: list[Path]) -> MagicMock:
    """Fake retrieval that writes a video into the target directory."""

    def fetch_media(url: str, target_dir: Path, cancel=None) -> DownloadedMedia:
        seen_dirs.append(target_dir)
        video = target_dir / "clip.mp4"
        video.write_bytes(b"fake video")
        return DownloadedMedia(
            file_path=video,
            mime_type="video/mp4",
            description="Best garlic noodles #dinner",
            thumbnail_url="https://cdn.example.net/thumb.jpg",
            creator_username="noodlechef",
        )

    retrieval = MagicMock()
    retrieval.fetch_media.side_effect = fetch_media
    return retrieval


class TestStrategySelection:
    """Tests for choosing the resolution strategy."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/shorts/abc",
            "https://youtu.be/abc",
            "https://www.instagram.com/reel/abc/",
            "https://vm.tiktok.com/abc",
        ],
    )
    def test_direct_domains(self, url):
        assert select_strategy(url, DIRECT_DOMAINS) is ResolutionMode.DIRECT

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.facebook.com/watch?v=1",
            "https://notyoutube.com/video",
            "https://example.com/youtube.com/fake",
        ],
    )
    def test_other_domains_download(self, url):
        assert select_strategy(url, DIRECT_DOMAINS) is ResolutionMode.DOWNLOAD

    def test_chain_never_goes_download_to_direct(self):
        assert strategy_chain("https://youtu.be/abc", DIRECT_DOMAINS) == [
            ResolutionMode.DIRECT,
            ResolutionMode.DOWNLOAD,
        ]
        assert strategy_chain("https://vimeo.com/1", DIRECT_DOMAINS) == [
            ResolutionMode.DOWNLOAD
        ]


class TestMediaResolver:
    """Tests for MediaResolver.resolve."""

    @pytest.mark.asyncio
    async def test_direct_success_skips_download(self):
        extractor = MagicMock()
        extractor.extract = AsyncMock(return_value=make_draft())
        retrieval = make_retrieval([])

        resolver = MediaResolver(extractor=extractor, retrieval=retrieval)
        resolved = await resolver.resolve("https://www.tiktok.com/@chef/video/1")

        assert resolved.mode is ResolutionMode.DIRECT
        assert resolved.draft.title == "Garlic Noodles"
        assert resolved.attribution is None
        retrieval.fetch_media.assert_not_called()

    @pytest.mark.asyncio
    async def test_direct_failure_falls_back_to_download(self):
        extractor = MagicMock()
        extractor.extract = AsyncMock(
            side_effect=[ContentExtractionError("url not understood"), make_draft()]
        )
        seen_dirs: list[Path] = []
        retrieval = make_retrieval(seen_dirs)

        resolver = MediaResolver(extractor=extractor, retrieval=retrieval)
        resolved = await resolver.resolve("https://www.instagram.com/reel/abc/")

        assert resolved.mode is ResolutionMode.DOWNLOAD
        assert resolved.description == "Best garlic noodles #dinner"
        assert resolved.thumbnail_ref == "https://cdn.example.net/thumb.jpg"
        assert resolved.attribution == "noodlechef"

        # Second call gets the local file plus the platform caption
        _, kwargs = extractor.extract.call_args
        assert kwargs["mime_type"] == "video/mp4"
        assert kwargs["auxiliary_description"] == "Best garlic noodles #dinner"

    @pytest.mark.asyncio
    async def test_downloaded_file_is_removed(self):
        extractor = MagicMock()
        extractor.extract = AsyncMock(return_value=make_draft())
        seen_dirs: list[Path] = []

        resolver = MediaResolver(extractor=extractor, retrieval=make_retrieval(seen_dirs))
        await resolver.resolve("https://vimeo.com/123")

        assert len(seen_dirs) == 1
        assert not seen_dirs[0].exists()

    @pytest.mark.asyncio
    async def test_downloaded_file_removed_when_extraction_fails(self):
        extractor = MagicMock()
        extractor.extract = AsyncMock(side_effect=ContentExtractionError("no recipe"))
        seen_dirs: list[Path] = []

        resolver = MediaResolver(extractor=extractor, retrieval=make_retrieval(seen_dirs))
        with pytest.raises(ContentExtractionError):
            await resolver.resolve("https://vimeo.com/123")

        assert not seen_dirs[0].exists()

    @pytest.mark.asyncio
    async def test_download_failure_is_fatal(self):
        extractor = MagicMock()
        extractor.extract = AsyncMock(side_effect=ContentExtractionError("url not understood"))
        retrieval = MagicMock()
        retrieval.fetch_media.side_effect = MediaDownloadError("private video")

        resolver = MediaResolver(extractor=extractor, retrieval=retrieval)
        with pytest.raises(MediaDownloadError):
            await resolver.resolve("https://youtu.be/abc")

        # Direct attempt only; the download path never hands back to direct
        assert extractor.extract.await_count == 1

    @pytest.mark.asyncio
    async def test_unexpected_direct_error_falls_back_to_download(self):
        content_service = MagicMock()
        content_service.understand = AsyncMock(
            side_effect=[
                AttributeError("'NoneType' object has no attribute 'get'"),
                {
                    "title": "Garlic Noodles",
                    "ingredients": [{"name": "noodles"}],
                    "instructions": ["Boil noodles"],
                },
            ]
        )
        retrieval = make_retrieval([])

        resolver = MediaResolver(
            extractor=ContentExtractor(content_service=content_service), retrieval=retrieval
        )
        resolved = await resolver.resolve("https://www.instagram.com/reel/abc/")

        assert resolved.mode is ResolutionMode.DOWNLOAD
        assert resolved.draft.title == "Garlic Noodles"
        retrieval.fetch_media.assert_called_once()

    @pytest.mark.asyncio
    async def test_download_timeout_stops_worker_before_cleanup(self):
        extractor = MagicMock()
        extractor.extract = AsyncMock(return_value=make_draft())
        worker_saw: dict = {}

        def slow_fetch(url: str, target_dir: Path, cancel: threading.Event) -> None:
            # Stand-in for a download that only stops when told to
            stopped = cancel.wait(timeout=5)
            worker_saw["cancelled"] = stopped
            worker_saw["dir_existed"] = target_dir.exists()
            worker_saw["dir"] = target_dir
            raise MediaDownloadError("Download cancelled")

        retrieval = MagicMock()
        retrieval.fetch_media.side_effect = slow_fetch

        resolver = MediaResolver(extractor=extractor, retrieval=retrieval)
        resolver.settings = resolver.settings.model_copy(update={"download_timeout_seconds": 0.05})

        started = time.monotonic()
        with pytest.raises(MediaDownloadError, match="timed out"):
            await resolver.resolve("https://vimeo.com/123")
        elapsed = time.monotonic() - started

        assert worker_saw["cancelled"] is True
        assert worker_saw["dir_existed"] is True
        assert not worker_saw["dir"].exists()
        assert elapsed < 2
        extractor.extract.assert_not_called()
