"""On-disk transcript cache keyed by video id and language."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ytx.config import Config
from ytx.models import Segment, Transcript, TranscriptSource
from ytx.writers.json_writer import render_json

logger = logging.getLogger(__name__)


def cache_path(video_id: str, lang: str, cache_dir: Optional[Path] = None) -> Path:
    return (cache_dir or Config.CACHE_DIR) / f"{video_id}-{lang}.json"


def _transcript_from_dict(data: Dict[str, Any]) -> Transcript:
    segments = [
        Segment(text=s['text'], start=float(s['start']), duration=float(s['duration']))
        for s in data.get('segments', [])
    ]
    return Transcript(
        video_id=data['video_id'],
        title=data.get('title') or "",
        language=data['language'],
        source=TranscriptSource(data['source']),
        segments=segments,
    )


def load(video_id: str, lang: str, cache_dir: Optional[Path] = None) -> Optional[Transcript]:
    """Load a cached transcript, if available."""
    path = cache_path(video_id, lang, cache_dir)
    if not path.exists():
        return None
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        transcript = _transcript_from_dict(data)
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.warning("Ignoring unreadable cache entry %s: %s", path, e)
        return None

    logger.debug("Cache hit: %s", path)
    return transcript


def save(transcript: Transcript, cache_dir: Optional[Path] = None) -> Path:
    """Save a transcript under its actual language."""
    path = cache_path(transcript.video_id, transcript.language, cache_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(render_json(transcript))
    logger.debug("Cached transcript: %s", path)
    return path
