"""Command-line entry point for YouTube transcript extraction."""

import subprocess
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer
from typer.core import TyperCommand

from ytx import cache
from ytx.acquire import acquire_transcript
from ytx.config import load_user_config
from ytx.errors import ConfigurationError, InputError, TranscriptError
from ytx.logging_setup import log_file_path, setup_logging
from ytx.models import Transcript
from ytx.summarize import DEFAULT_MODEL, summarize
from ytx.transcriber import DEFAULT_MODEL as DEFAULT_WHISPER_MODEL
from ytx.transcriber import WhisperModel
from ytx.video_id import extract_video_id
from ytx.writers.json_writer import render_json
from ytx.writers.srt_writer import render_srt
from ytx.writers.txt_writer import render_text

DEFAULT_LANG = "en"


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"
    SRT = "srt"


@dataclass
class RunOptions:
    lang: str = DEFAULT_LANG
    output_format: OutputFormat = OutputFormat.TEXT
    summarize: bool = False
    model: str = DEFAULT_MODEL
    whisper_only: bool = False
    no_fallback: bool = False
    whisper_model: WhisperModel = DEFAULT_WHISPER_MODEL
    timestamps: bool = False
    use_cache: bool = True
    verbose: bool = False


def tool_version(name: str) -> Optional[str]:
    """First line of `<name> --version`, or None if the tool is unavailable."""
    try:
        result = subprocess.run(
            [name, "--version"], stdout=subprocess.PIPE, stderr=subprocess.DEVNULL, text=True, timeout=10
        )
    except (OSError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    lines = result.stdout.strip().splitlines()
    return lines[0] if lines else ""


def build_epilog() -> str:
    lines = ["REQUIRED TOOLS:"]
    for name, purpose in (("yt-dlp", "Whisper fallback"), ("ffmpeg", "splitting long audio")):
        version = tool_version(name)
        if version is not None:
            lines.append(f"  ✅ {name:<8} {version}")
        else:
            lines.append(f"  ❌ {name:<8} (not found, needed for {purpose})")
    lines.append("")
    lines.append(f"Logs are written to: {log_file_path()}")
    # Blank lines keep click from re-wrapping the list
    return "\n\n".join(lines)


def render(transcript: Transcript, options: RunOptions) -> str:
    if options.output_format is OutputFormat.JSON:
        return render_json(transcript)
    if options.output_format is OutputFormat.SRT:
        return render_srt(transcript)
    return render_text(transcript, timestamps=options.timestamps)


def process_video(raw_input: str, options: RunOptions) -> str:
    """
    Process a single input: resolve the id, get a transcript, render it.

    Returns:
        The rendered transcript, or the summary when options.summarize is set
    """
    video_id = extract_video_id(raw_input)
    if video_id is None:
        raise InputError(f"could not extract video ID from: {raw_input.strip()}")

    transcript = None
    if options.use_cache and not options.whisper_only:
        transcript = cache.load(video_id, options.lang)
        if transcript is not None:
            print(f"✓ Using cached transcript for video {video_id}", file=sys.stderr)

    if transcript is None:
        transcript = acquire_transcript(
            video_id,
            options.lang,
            whisper_only=options.whisper_only,
            no_fallback=options.no_fallback,
            whisper_model=options.whisper_model,
        )
        if options.use_cache:
            try:
                cache.save(transcript)
            except OSError as e:
                print(f"⚠ Could not write transcript cache: {e}", file=sys.stderr)

    if options.verbose:
        print(
            f"Video: {transcript.title} ({transcript.video_id})\n"
            f"Source: {transcript.source}\n"
            f"Language: {transcript.language}\n"
            f"Segments: {len(transcript.segments)}",
            file=sys.stderr,
        )

    if options.summarize:
        return summarize(transcript, options.model)
    return render(transcript, options)


def read_inputs(url: Optional[str]) -> List[str]:
    """The single URL argument, or one input per non-blank stdin line."""
    if url is not None:
        return [url]
    return [line.strip() for line in sys.stdin if line.strip()]


class ToolCheckCommand(TyperCommand):
    """Builds the tool listing only when help is actually shown."""

    def format_help(self, ctx, formatter):
        self.epilog = build_epilog()
        super().format_help(ctx, formatter)


app = typer.Typer(
    name="ytx",
    help="YouTube transcript extractor",
    add_completion=False,
)


@app.command(cls=ToolCheckCommand)
def main(
    url: Optional[str] = typer.Argument(
        None, help="YouTube video URL or video ID (reads from stdin if omitted)"
    ),
    summarize_flag: bool = typer.Option(
        False, "--summarize", "-s", help="Summarize the transcript via LLM"
    ),
    output_format: Optional[OutputFormat] = typer.Option(
        None, "--format", "-f", case_sensitive=False, help="Output format: text (default), json, srt"
    ),
    lang: Optional[str] = typer.Option(None, "--lang", "-l", help="Preferred caption language [default: en]"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write output to file instead of stdout"),
    whisper_only: bool = typer.Option(False, "--whisper-only", help="Skip caption extraction, always use Whisper"),
    no_fallback: bool = typer.Option(False, "--no-fallback", help="Don't fall back to Whisper if captions unavailable"),
    model: Optional[str] = typer.Option(None, "--model", help=f"LLM model for summarization [default: {DEFAULT_MODEL}]"),
    whisper_model: Optional[str] = typer.Option(
        None, "--whisper-model", help=f"Whisper model [default: {DEFAULT_WHISPER_MODEL.value}]"
    ),
    timestamps: bool = typer.Option(False, "--timestamps", help="Prefix text output lines with timestamps"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Ignore and don't update the transcript cache"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show extraction method and metadata"),
) -> None:
    """Extract the transcript of one or more YouTube videos."""
    setup_logging()

    try:
        user_config = load_user_config()
        resolved_format = output_format or OutputFormat(
            (user_config.default_format or OutputFormat.TEXT.value).lower()
        )
        resolved_whisper = WhisperModel.from_name(
            whisper_model or user_config.whisper_model or DEFAULT_WHISPER_MODEL.value
        )
    except (ConfigurationError, ValueError) as e:
        typer.echo(f"✗ Configuration Error: {e}", err=True)
        raise typer.Exit(code=1)

    options = RunOptions(
        lang=lang or user_config.default_lang or DEFAULT_LANG,
        output_format=resolved_format,
        summarize=summarize_flag,
        model=model or user_config.default_model or DEFAULT_MODEL,
        whisper_only=whisper_only,
        no_fallback=no_fallback,
        whisper_model=resolved_whisper,
        timestamps=timestamps,
        use_cache=not no_cache,
        verbose=verbose,
    )

    inputs = read_inputs(url)
    if not inputs:
        typer.echo("✗ No URL or video ID provided", err=True)
        raise typer.Exit(code=1)

    failures = 0
    results = []
    for raw_input in inputs:
        try:
            rendered = process_video(raw_input, options)
        except TranscriptError as e:
            failures += 1
            typer.echo(f"✗ Failed to process {raw_input.strip()}: {e}", err=True)
            continue

        if output is None:
            typer.echo(rendered)
        else:
            results.append(rendered)

    if output is not None and results:
        try:
            output.write_text("\n".join(results), encoding="utf-8")
        except OSError as e:
            typer.echo(f"✗ Could not write output file {output}: {e}", err=True)
            raise typer.Exit(code=1)
        typer.echo(f"✓ Output written to: {output}", err=True)

    raise typer.Exit(code=1 if failures else 0)


if __name__ == "__main__":
    app()
