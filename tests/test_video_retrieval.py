"""Tests for yt-dlp backed video retrieval."""

import threading
import time
from unittest.mock import MagicMock, patch

import pytest
import yt_dlp

from src.services.errors import MediaDownloadError
from src.services.video_retrieval import VideoRetrievalService, _cancellation_hook


def fake_youtube_dl(progress_updates: int = 3) -> MagicMock:
    """YoutubeDL stand-in that reports progress through the configured hooks."""

    def build(opts: dict) -> MagicMock:
        ydl = MagicMock()
        ydl.__enter__.return_value = ydl

        def extract_info(url, download=True):
            for _ in range(progress_updates):
                for hook in opts["progress_hooks"]:
                    hook({"status": "downloading"})
            return {"id": "abc", "requested_downloads": []}

        ydl.extract_info.side_effect = extract_info
        return ydl

    return MagicMock(side_effect=build)


class TestCancellationHook:
    """Tests for the progress hook that bounds a download."""

    def test_passes_while_running(self):
        hook = _cancellation_hook(time.monotonic() + 60, threading.Event())
        hook({"status": "downloading"})

    def test_cancel_event_stops_download(self):
        cancel = threading.Event()
        cancel.set()
        hook = _cancellation_hook(time.monotonic() + 60, cancel)

        with pytest.raises(yt_dlp.utils.DownloadCancelled):
            hook({"status": "downloading"})

    def test_deadline_stops_download(self):
        hook = _cancellation_hook(time.monotonic() - 1)

        with pytest.raises(yt_dlp.utils.DownloadCancelled):
            hook({"status": "downloading"})


class TestFetchMedia:
    """Tests for VideoRetrievalService.fetch_media."""

    def test_cancelled_download_is_media_error(self, tmp_path):
        cancel = threading.Event()
        cancel.set()

        with patch("src.services.video_retrieval.yt_dlp.YoutubeDL", fake_youtube_dl()):
            with pytest.raises(MediaDownloadError, match="Could not download"):
                VideoRetrievalService().fetch_media("https://vimeo.com/123", tmp_path, cancel)

    def test_downloaded_file_found_in_target_dir(self, tmp_path):
        (tmp_path / "abc.mp4").write_bytes(b"video")

        with patch("src.services.video_retrieval.yt_dlp.YoutubeDL", fake_youtube_dl()):
            media = VideoRetrievalService().fetch_media(
                "https://vimeo.com/123", tmp_path, threading.Event()
            )

        assert media.file_path == tmp_path / "abc.mp4"
        assert media.mime_type == "video/mp4"
