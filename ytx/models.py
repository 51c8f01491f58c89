"""Data models for transcripts and segments."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class TranscriptSource(Enum):
    """Where a transcript came from."""
    CAPTION = "caption"
    WHISPER = "whisper"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Segment:
    """A single segment of transcribed text with timing information."""
    text: str        # Non-empty, entity-decoded
    start: float     # Start time in seconds
    duration: float  # Length in seconds

    @property
    def end(self) -> float:
        return self.start + self.duration


@dataclass(frozen=True)
class Transcript:
    """Complete transcript with metadata."""
    video_id: str
    title: str
    language: str
    source: TranscriptSource
    segments: list[Segment] = field(default_factory=list)


@dataclass(frozen=True)
class CaptionTrack:
    """A platform caption track, as listed by the player API."""
    language_code: str
    base_url: str


@dataclass(frozen=True)
class AudioChunk:
    """A time slice of a downloaded audio file."""
    index: int
    path: Path
    start_offset: float
