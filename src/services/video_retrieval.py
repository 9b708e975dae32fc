"""Video retrieval service backed by yt-dlp."""

import logging
import mimetypes
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

import httpx
import yt_dlp

from src.config import get_settings
from src.services.errors import MediaDownloadError

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class DownloadedMedia:
    """A media file on local disk plus the platform's metadata for it."""

    file_path: Path
    mime_type: str
    description: str | None = None
    thumbnail_url: str | None = None
    creator_username: str | None = None


def _clean_string(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _extract_thumbnail(info: dict) -> str | None:
    """Pick the direct thumbnail, or the largest one in the thumbnails list."""
    direct_url = _clean_string(info.get("thumbnail"))
    if direct_url:
        return direct_url

    thumbnails = info.get("thumbnails")
    if not isinstance(thumbnails, list):
        return None
    candidates = [
        entry
        for entry in thumbnails
        if isinstance(entry, dict) and _clean_string(entry.get("url"))
    ]
    if not candidates:
        return None
    best = max(
        candidates,
        key=lambda entry: (
            entry.get("preference") or 0,
            entry.get("width") or 0,
            entry.get("height") or 0,
        ),
    )
    return best["url"].strip()


def _downloaded_path(info: dict, target_dir: Path) -> Path | None:
    downloads = info.get("requested_downloads") or []
    for entry in downloads:
        path = entry.get("filepath") or entry.get("filename")
        if path and Path(path).exists():
            return Path(path)
    files = [p for p in target_dir.iterdir() if p.is_file() and not p.name.endswith(".part")]
    return files[0] if files else None


def _cancellation_hook(deadline: float, cancel: threading.Event | None = None):
    """yt-dlp progress hook that aborts once cancelled or past the deadline."""

    def hook(progress: dict) -> None:
        if cancel is not None and cancel.is_set():
            raise yt_dlp.utils.DownloadCancelled("Download cancelled")
        if time.monotonic() > deadline:
            raise yt_dlp.utils.DownloadCancelled("Download deadline exceeded")

    return hook


class VideoRetrievalService:
    """Downloads social-media videos and their thumbnails."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.timeout = self.settings.download_timeout_seconds

    def fetch_media(
        self, url: str, target_dir: Path, cancel: threading.Event | None = None
    ) -> DownloadedMedia:
        """Download the video behind a post URL into target_dir.

        The download stops at the next progress update once cancel is set
        or the configured download timeout has elapsed.

        Raises:
            MediaDownloadError: if the video cannot be retrieved in time
        """
        deadline = time.monotonic() + self.timeout
        ydl_opts = {
            "outtmpl": str(target_dir / "%(id)s.%(ext)s"),
            "format": "best[ext=mp4]/best",
            "noplaylist": True,
            "quiet": True,
            "no_warnings": True,
            "noprogress": True,
            "socket_timeout": self.timeout,
            "http_headers": {"User-Agent": USER_AGENT},
            "progress_hooks": [_cancellation_hook(deadline, cancel)],
        }

        logger.info(f"Downloading media from {url}")
        try:
            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                info = ydl.extract_info(url, download=True)
        except yt_dlp.utils.YoutubeDLError as e:
            raise MediaDownloadError(f"Could not download {url}: {e}") from e

        if (cancel is not None and cancel.is_set()) or time.monotonic() > deadline:
            raise MediaDownloadError(f"Download of {url} was cancelled")

        if not info:
            raise MediaDownloadError(f"No media information returned for {url}")
        if info.get("_type") == "playlist":
            entries = [entry for entry in info.get("entries") or [] if entry]
            if not entries:
                raise MediaDownloadError(f"Playlist at {url} has no downloadable entries")
            info = entries[0]

        file_path = _downloaded_path(info, target_dir)
        if file_path is None:
            raise MediaDownloadError(f"Downloaded file for {url} not found")

        mime_type = mimetypes.guess_type(file_path.name)[0] or "video/mp4"
        logger.info(f"Downloaded {url} to {file_path} ({mime_type})")

        return DownloadedMedia(
            file_path=file_path,
            mime_type=mime_type,
            description=_clean_string(info.get("description")),
            thumbnail_url=_extract_thumbnail(info),
            creator_username=_clean_string(
                info.get("uploader_id") or info.get("uploader") or info.get("channel")
            ),
        )

    def fetch_thumbnail(self, remote_url: str, target_dir: Path) -> Path:
        """Download a remote thumbnail image into target_dir."""
        with httpx.Client(
            timeout=30.0, follow_redirects=True, headers={"User-Agent": USER_AGENT}
        ) as client:
            response = client.get(remote_url)
            response.raise_for_status()

        path = target_dir / f"thumb_{uuid4().hex}.jpg"
        path.write_bytes(response.content)
        return path


def get_video_retrieval_service() -> VideoRetrievalService:
    """Get a video retrieval service instance."""
    return VideoRetrievalService()
