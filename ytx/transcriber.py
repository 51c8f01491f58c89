"""OpenAI Whisper API integration for transcription."""

import logging
import math
import subprocess
import sys
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from openai import OpenAI
from openai import APIConnectionError, APIStatusError
from tqdm import tqdm

from ytx.config import Config
from ytx.downloader import download_audio, get_video_title
from ytx.errors import (
    AudioFileError,
    ChunkSplitFailedError,
    DownloadFailedError,
    UnexpectedFormatError,
    WhisperApiError,
)
from ytx.models import AudioChunk, Segment, Transcript, TranscriptSource

logger = logging.getLogger(__name__)

# OpenAI rejects uploads above 25 MB
MAX_UPLOAD_BYTES = 25 * 1024 * 1024

CHUNK_SECONDS = 1200  # 20 minutes
ASSUMED_BITRATE = 64_000  # bits per second, used to estimate duration from size

FFMPEG = "ffmpeg"


class WhisperModel(Enum):
    """Transcription models accepted by the OpenAI audio API."""
    GPT_4O_MINI_TRANSCRIBE = "gpt-4o-mini-transcribe"
    GPT_4O_TRANSCRIBE = "gpt-4o-transcribe"
    WHISPER_1 = "whisper-1"

    @property
    def api_name(self) -> str:
        return self.value

    @property
    def response_format(self) -> str:
        # Newer transcribe models only support "json" or "text"
        if self is WhisperModel.WHISPER_1:
            return "verbose_json"
        return "json"

    @property
    def supports_timestamp_granularities(self) -> bool:
        return self is WhisperModel.WHISPER_1

    @classmethod
    def from_name(cls, name: str) -> "WhisperModel":
        for model in cls:
            if model.value == name:
                return model
        choices = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown Whisper model '{name}' (choose from: {choices})")


DEFAULT_MODEL = WhisperModel.WHISPER_1


def _make_client(api_key: str, file_size_bytes: int) -> OpenAI:
    # Calculate timeout: base 5 minutes + 1 minute per 10MB, capped at 30 minutes
    file_size_mb = file_size_bytes / (1024 * 1024)
    timeout_seconds = min(300.0 + (file_size_mb / 10) * 60.0, 1800.0)
    # Retries are handled by ytx.backoff around the whole fallback path
    return OpenAI(api_key=api_key, timeout=timeout_seconds, max_retries=0)


def _response_to_dict(response: Any) -> Dict[str, Any]:
    if hasattr(response, 'model_dump'):
        return response.model_dump()
    if isinstance(response, dict):
        return response
    return {
        'text': getattr(response, 'text', None),
        'segments': getattr(response, 'segments', None),
    }


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def parse_whisper_response(data: Dict[str, Any]) -> List[Segment]:
    """
    Turn a transcription response into segments.

    verbose_json responses carry a "segments" array; entries missing text,
    start or end, or with blank text, are skipped. Plain json responses only
    have "text", which becomes one segment at 0 with zero duration.
    """
    raw_segments = data.get('segments')
    if isinstance(raw_segments, list):
        segments = []
        for seg in raw_segments:
            if not isinstance(seg, dict):
                continue
            text = seg.get('text')
            start = _number(seg.get('start'))
            end = _number(seg.get('end'))
            if not isinstance(text, str) or start is None or end is None:
                continue
            text = text.strip()
            if not text:
                continue
            segments.append(Segment(text=text, start=start, duration=end - start))
        return segments

    text = data.get('text')
    if isinstance(text, str):
        text = text.strip()
        return [Segment(text=text, start=0.0, duration=0.0)] if text else []

    raise UnexpectedFormatError("unexpected Whisper API response format")


def transcribe_file(client: OpenAI, audio_path: Path, model: WhisperModel, lang: str) -> List[Segment]:
    """Upload one audio file and return its segments."""
    logger.debug("Uploading %s to Whisper API (model=%s)", audio_path, model.api_name)

    request_params = {
        "model": model.api_name,
        "language": lang,
        "response_format": model.response_format,
    }
    if model.supports_timestamp_granularities:
        request_params["timestamp_granularities"] = ["segment"]

    try:
        with open(audio_path, 'rb') as audio_file:
            response = client.audio.transcriptions.create(file=audio_file, **request_params)
    except APIStatusError as e:
        raise WhisperApiError(e.status_code, e.response.text) from e
    except APIConnectionError as e:
        raise WhisperApiError(None, str(e)) from e
    except OSError as e:
        raise AudioFileError(f"could not read audio file {audio_path}: {e}") from e

    return parse_whisper_response(_response_to_dict(response))


def estimate_chunk_count(file_size_bytes: int) -> int:
    """Number of CHUNK_SECONDS slices, assuming ASSUMED_BITRATE audio."""
    estimated_duration = file_size_bytes / (ASSUMED_BITRATE / 8)
    return max(1, math.ceil(estimated_duration / CHUNK_SECONDS))


def plan_chunks(audio_path: Path, file_size_bytes: int) -> List[AudioChunk]:
    return [
        AudioChunk(
            index=i,
            path=audio_path.with_name(f"{audio_path.stem}-chunk-{i}{audio_path.suffix}"),
            start_offset=float(i * CHUNK_SECONDS),
        )
        for i in range(estimate_chunk_count(file_size_bytes))
    ]


def offset_segments(segments: List[Segment], offset: float) -> List[Segment]:
    """Shift segment start times by `offset` seconds."""
    return [replace(seg, start=seg.start + offset) for seg in segments]


def split_chunk(audio_path: Path, chunk: AudioChunk) -> None:
    """Copy CHUNK_SECONDS of audio starting at the chunk offset, without re-encoding."""
    command = [
        FFMPEG,
        "-y",
        "-i", str(audio_path),
        "-ss", f"{chunk.start_offset:.0f}",
        "-t", str(CHUNK_SECONDS),
        "-acodec", "copy",
        str(chunk.path),
    ]
    try:
        result = subprocess.run(command, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except FileNotFoundError as e:
        raise ChunkSplitFailedError(
            "ffmpeg not found. Install it to transcribe long videos:\n"
            "  brew install ffmpeg\n"
            "  or: apt install ffmpeg"
        ) from e
    except OSError as e:
        raise ChunkSplitFailedError(f"failed to run ffmpeg: {e}") from e

    if result.returncode != 0:
        raise ChunkSplitFailedError(
            f"ffmpeg failed to split audio at offset {chunk.start_offset:.0f}s"
        )


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.debug("Could not delete %s: %s", path, e)


def transcribe_chunked(
    client: OpenAI,
    audio_path: Path,
    file_size_bytes: int,
    model: WhisperModel,
    lang: str,
) -> List[Segment]:
    """
    Split oversized audio into 20-minute slices and transcribe them in order.

    Any failure aborts the whole run; segments from earlier chunks are
    discarded.
    """
    chunks = plan_chunks(audio_path, file_size_bytes)
    logger.debug("Splitting into %d chunks of %ds each", len(chunks), CHUNK_SECONDS)

    all_segments: List[Segment] = []
    for chunk in tqdm(chunks, desc="Transcribing", unit="chunk", leave=False, file=sys.stderr):
        try:
            split_chunk(audio_path, chunk)
            segments = transcribe_file(client, chunk.path, model, lang)
        finally:
            _remove_quietly(chunk.path)
        all_segments.extend(offset_segments(segments, chunk.start_offset))

    return all_segments


def transcribe(video_id: str, lang: str, model: WhisperModel = DEFAULT_MODEL) -> Transcript:
    """
    Transcribe a video with yt-dlp + the OpenAI transcription API.

    Args:
        video_id: YouTube video ID
        lang: Language code passed to the API
        model: Transcription model

    Returns:
        Transcript with source WHISPER
    """
    api_key = Config.require_openai_key()

    audio_path = download_audio(video_id)
    title = get_video_title(video_id)

    try:
        file_size_bytes = audio_path.stat().st_size
    except OSError as e:
        raise DownloadFailedError(f"downloaded audio is missing or unreadable: {e}") from e
    logger.debug("Audio file size: %d bytes", file_size_bytes)

    client = _make_client(api_key, file_size_bytes)
    logger.debug("Using response_format=%s", model.response_format)

    if file_size_bytes > MAX_UPLOAD_BYTES:
        print(
            f"⚠ Audio is {file_size_bytes / (1024 * 1024):.1f} MB, over the 25 MB upload limit. "
            f"Splitting into chunks...",
            file=sys.stderr,
        )
        segments = transcribe_chunked(client, audio_path, file_size_bytes, model, lang)
    else:
        segments = transcribe_file(client, audio_path, model, lang)

    # Keep the download until now so retries after API errors can reuse it
    _remove_quietly(audio_path)

    return Transcript(
        video_id=video_id,
        title=title,
        language=lang,
        source=TranscriptSource.WHISPER,
        segments=segments,
    )
