"""Writer for plain text format."""

from ytx.models import Transcript


def format_seconds(seconds: float) -> str:
    """Format seconds as HH:MM:SS."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def render_text(transcript: Transcript, timestamps: bool = False) -> str:
    """
    Render transcript as text, one segment per line.

    With timestamps, each line is prefixed: [HH:MM:SS - HH:MM:SS] text
    """
    lines = []
    for segment in transcript.segments:
        if timestamps:
            start_time = format_seconds(segment.start)
            end_time = format_seconds(segment.end)
            lines.append(f"[{start_time} - {end_time}] {segment.text}")
        else:
            lines.append(segment.text)
    return "\n".join(lines)
