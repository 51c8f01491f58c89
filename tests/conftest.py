import pytest

from ytx.config import Config
from ytx.models import Segment, Transcript, TranscriptSource


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep caches, logs, temp audio and config inside tmp_path."""
    monkeypatch.setattr(Config, "CACHE_DIR", tmp_path / "cache")
    monkeypatch.setattr(Config, "LOG_DIR", tmp_path / "logs")
    monkeypatch.setattr(Config, "TEMP_DIR", tmp_path / "tmp")
    monkeypatch.setattr(Config, "CONFIG_PATH", tmp_path / "config.toml")
    monkeypatch.setattr(Config, "OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(Config, "ANTHROPIC_API_KEY", "sk-ant-test")
    (tmp_path / "tmp").mkdir()


@pytest.fixture
def no_sleep(monkeypatch):
    """Record backoff delays instead of sleeping."""
    delays = []
    monkeypatch.setattr("ytx.backoff.time.sleep", delays.append)
    return delays


@pytest.fixture
def sample_transcript():
    return Transcript(
        video_id="dQw4w9WgXcQ",
        title="Test Video",
        language="en",
        source=TranscriptSource.CAPTION,
        segments=[
            Segment(text="Hello world", start=0.0, duration=1.5),
            Segment(text="This is a test", start=1.5, duration=2.0),
        ],
    )
