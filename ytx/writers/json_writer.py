"""Writer for JSON format."""

import json
from typing import Any, Dict

from ytx.models import Transcript


def transcript_to_dict(transcript: Transcript) -> Dict[str, Any]:
    return {
        'video_id': transcript.video_id,
        'title': transcript.title,
        'language': transcript.language,
        'source': transcript.source.value,
        'segments': [
            {
                'text': segment.text,
                'start': segment.start,
                'duration': segment.duration,
            }
            for segment in transcript.segments
        ]
    }


def render_json(transcript: Transcript) -> str:
    """Render transcript as a pretty-printed JSON document."""
    return json.dumps(transcript_to_dict(transcript), indent=2, ensure_ascii=False)
