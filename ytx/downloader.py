"""YouTube audio downloader using yt-dlp."""

import logging
import subprocess
from pathlib import Path
from typing import Optional

import yt_dlp

from ytx.config import Config
from ytx.errors import DownloadFailedError
from ytx.video_id import watch_url

logger = logging.getLogger(__name__)

YT_DLP = "yt-dlp"
AUDIO_FORMAT = "mp3"

INSTALL_HINT = (
    "yt-dlp not found. Install it to enable Whisper fallback:\n"
    "  pip install yt-dlp\n"
    "  or: brew install yt-dlp"
)


def audio_path_for(video_id: str, temp_dir: Optional[Path] = None) -> Path:
    """Deterministic download location for a video's audio."""
    return (temp_dir or Config.TEMP_DIR) / f"ytx-{video_id}.{AUDIO_FORMAT}"


def download_audio(video_id: str, temp_dir: Optional[Path] = None) -> Path:
    """
    Download a video's audio track as a low-quality mp3.

    An existing file at the target path is reused, so retrying after an
    upload failure does not download again.

    Returns:
        Path to the mp3 file
    """
    output_path = audio_path_for(video_id, temp_dir)
    if output_path.exists():
        logger.debug("Audio file already exists, skipping download: %s", output_path)
        return output_path

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DownloadFailedError(f"could not create download directory {output_path.parent}: {e}") from e
    output_template = str(output_path.with_suffix(".%(ext)s"))
    url = watch_url(video_id)

    command = [
        YT_DLP,
        "--extract-audio",
        "--audio-format", AUDIO_FORMAT,
        "--audio-quality", "9",  # lowest quality; speech doesn't need more
        "--no-playlist",
        "-o", output_template,
        url,
    ]
    logger.debug("Downloading audio via yt-dlp: %s", url)

    try:
        result = subprocess.run(
            command, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, errors="replace"
        )
    except FileNotFoundError as e:
        raise DownloadFailedError(INSTALL_HINT, binary_missing=True) from e
    except OSError as e:
        raise DownloadFailedError(f"failed to run yt-dlp: {e}") from e

    if result.returncode != 0:
        detail = (result.stderr or "").strip().splitlines()
        message = f"yt-dlp exited with status {result.returncode}"
        if detail:
            message += f": {detail[-1]}"
        raise DownloadFailedError(message)

    if not output_path.exists():
        raise DownloadFailedError(f"yt-dlp did not produce expected output file: {output_path}")

    return output_path


def get_video_title(video_id: str) -> str:
    """Look up the video title. Best effort: returns "" on any failure."""
    ydl_opts = {
        'quiet': True,
        'no_warnings': True,
        'skip_download': True,
        'noplaylist': True,
    }
    try:
        with yt_dlp.YoutubeDL(ydl_opts) as ydl:
            info = ydl.extract_info(watch_url(video_id), download=False)
    except Exception as e:
        # yt-dlp re-raises unexpected extractor errors as-is
        logger.debug("Title lookup failed for %s: %s", video_id, e)
        return ""

    title = (info or {}).get('title')
    return title.strip() if isinstance(title, str) else ""
