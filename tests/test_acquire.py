import pytest

from ytx import acquire
from ytx.acquire import acquire_transcript
from ytx.errors import (
    AcquisitionError,
    DownloadFailedError,
    MissingCredentialError,
    NoCaptionsError,
    PageFetchError,
    WhisperApiError,
)
from ytx.models import Transcript, TranscriptSource
from ytx.transcriber import WhisperModel

VIDEO_ID = "dQw4w9WgXcQ"


def make_transcript(source):
    return Transcript(video_id=VIDEO_ID, title="T", language="en", source=source)


class Script:
    """Callable that plays back a list of results, raising exceptions."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def captions(monkeypatch):
    def install(*results):
        script = Script(*results)
        monkeypatch.setattr(acquire, "fetch_captions", script)
        return script
    return install


@pytest.fixture
def whisper(monkeypatch):
    def install(*results):
        script = Script(*results)
        monkeypatch.setattr(acquire, "transcribe", script)
        return script
    return install


def test_captions_succeed(captions, whisper, no_sleep):
    fetch = captions(make_transcript(TranscriptSource.CAPTION))
    transcribe = whisper()

    transcript = acquire_transcript(VIDEO_ID, "en")

    assert transcript.source is TranscriptSource.CAPTION
    assert len(fetch.calls) == 1
    assert transcribe.calls == []
    assert no_sleep == []


def test_transient_caption_failure_is_retried(captions, whisper, no_sleep):
    captions(PageFetchError("timeout"), make_transcript(TranscriptSource.CAPTION))
    whisper()

    transcript = acquire_transcript(VIDEO_ID, "en")

    assert transcript.source is TranscriptSource.CAPTION
    assert no_sleep == [0.5]


def test_falls_back_to_whisper(captions, whisper, no_sleep, capsys):
    fetch = captions(*[NoCaptionsError("no captions available")] * 3)
    transcribe = whisper(make_transcript(TranscriptSource.WHISPER))

    transcript = acquire_transcript(VIDEO_ID, "en", whisper_model=WhisperModel.GPT_4O_TRANSCRIBE)

    assert transcript.source is TranscriptSource.WHISPER
    assert len(fetch.calls) == 3
    assert transcribe.calls == [((VIDEO_ID, "en", WhisperModel.GPT_4O_TRANSCRIBE), {})]
    assert "falling back to Whisper" in capsys.readouterr().err


def test_no_fallback_reports_caption_path(captions, whisper, no_sleep):
    captions(*[NoCaptionsError("no captions available")] * 3)
    transcribe = whisper()

    with pytest.raises(AcquisitionError) as excinfo:
        acquire_transcript(VIDEO_ID, "en", no_fallback=True)

    assert excinfo.value.path == "captions"
    assert isinstance(excinfo.value.cause, NoCaptionsError)
    assert transcribe.calls == []


def test_both_paths_fail(captions, whisper, no_sleep):
    captions(*[NoCaptionsError("none")] * 3)
    whisper(*[WhisperApiError(500, "boom")] * 3)

    with pytest.raises(AcquisitionError) as excinfo:
        acquire_transcript(VIDEO_ID, "en")

    assert excinfo.value.path == "both"
    assert excinfo.value.cause.status == 500
    assert no_sleep == [0.5, 1.0, 0.5, 1.0]


def test_whisper_only_skips_captions(captions, whisper, no_sleep):
    fetch = captions()
    whisper(make_transcript(TranscriptSource.WHISPER))

    transcript = acquire_transcript(VIDEO_ID, "en", whisper_only=True)

    assert transcript.source is TranscriptSource.WHISPER
    assert fetch.calls == []


def test_whisper_only_failure(captions, whisper, no_sleep):
    captions()
    whisper(DownloadFailedError("yt-dlp not found", binary_missing=True))

    with pytest.raises(AcquisitionError) as excinfo:
        acquire_transcript(VIDEO_ID, "en", whisper_only=True)

    assert excinfo.value.path == "whisper"
    assert no_sleep == []


def test_missing_credential_is_not_retried(captions, whisper, no_sleep):
    captions(*[NoCaptionsError("none")] * 3)
    transcribe = whisper(MissingCredentialError("OPENAI_API_KEY"))

    with pytest.raises(AcquisitionError) as excinfo:
        acquire_transcript(VIDEO_ID, "en")

    assert isinstance(excinfo.value.cause, MissingCredentialError)
    assert "OPENAI_API_KEY" in str(excinfo.value)
    assert len(transcribe.calls) == 1


def test_attempt_budget_is_configurable(captions, whisper, no_sleep):
    fetch = captions(NoCaptionsError("none"))
    whisper(make_transcript(TranscriptSource.WHISPER))

    acquire_transcript(VIDEO_ID, "en", max_attempts=1)

    assert len(fetch.calls) == 1
    assert no_sleep == []
