"""Caption-first transcript acquisition with Whisper fallback."""

import logging
import sys
from typing import Optional

import requests

from ytx.backoff import MAX_ATTEMPTS, retry
from ytx.captions import fetch_captions
from ytx.errors import AcquisitionError, CaptionError, WhisperError
from ytx.models import Transcript
from ytx.transcriber import DEFAULT_MODEL, WhisperModel, transcribe

logger = logging.getLogger(__name__)


def acquire_transcript(
    video_id: str,
    lang: str,
    whisper_only: bool = False,
    no_fallback: bool = False,
    whisper_model: WhisperModel = DEFAULT_MODEL,
    session: Optional[requests.Session] = None,
    max_attempts: int = MAX_ATTEMPTS,
) -> Transcript:
    """
    Get a transcript for one video.

    Captions are tried first (with retries); if they fail and fallback is
    allowed, audio is transcribed with Whisper (also with retries). With
    whisper_only the caption step is skipped.

    Raises:
        AcquisitionError: naming the path that failed ("captions",
            "whisper" or "both") and wrapping the last error.
    """
    def run_whisper() -> Transcript:
        return retry(
            lambda: transcribe(video_id, lang, whisper_model),
            max_attempts=max_attempts,
            on_exceptions=WhisperError,
            label=f"Whisper transcription of {video_id}",
        )

    if whisper_only:
        try:
            return run_whisper()
        except WhisperError as e:
            raise AcquisitionError(video_id, "whisper", e) from e

    try:
        return retry(
            lambda: fetch_captions(video_id, lang, session=session),
            max_attempts=max_attempts,
            on_exceptions=CaptionError,
            label=f"caption fetch for {video_id}",
        )
    except CaptionError as caption_error:
        if no_fallback:
            raise AcquisitionError(video_id, "captions", caption_error) from caption_error

        logger.info("Captions failed for %s, falling back to Whisper: %s", video_id, caption_error)
        print(f"⚠ Caption extraction failed, falling back to Whisper: {caption_error}", file=sys.stderr)

        try:
            return run_whisper()
        except WhisperError as e:
            raise AcquisitionError(video_id, "both", e) from e
