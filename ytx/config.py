"""Configuration management and environment variable loading."""

import os
import tempfile
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ytx.errors import ConfigurationError, MissingCredentialError

# Load environment variables from .env file (don't override existing env vars)
load_dotenv(override=False)


def _xdg_dir(variable: str, fallback: str) -> Path:
    value = os.getenv(variable)
    return Path(value) if value else Path.home() / fallback


class Config:
    """Application configuration."""

    # Simple class attributes - read from environment
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    ANTHROPIC_API_KEY: str = os.getenv("ANTHROPIC_API_KEY", "")

    CONFIG_PATH: Path = Path(
        os.getenv("YTX_CONFIG", "") or _xdg_dir("XDG_CONFIG_HOME", ".config") / "ytx" / "config.toml"
    )
    CACHE_DIR: Path = Path(
        os.getenv("YTX_CACHE_DIR", "") or _xdg_dir("XDG_CACHE_HOME", ".cache") / "ytx" / "transcripts"
    )
    LOG_DIR: Path = Path(
        os.getenv("YTX_LOG_DIR", "") or _xdg_dir("XDG_DATA_HOME", ".local/share") / "ytx" / "logs"
    )
    LOG_LEVEL: str = os.getenv("YTX_LOG_LEVEL", "INFO").upper()

    # Downloaded audio and chunk slices live here, named by video id
    TEMP_DIR: Path = Path(os.getenv("YTX_TEMP_DIR", "") or tempfile.gettempdir())

    @classmethod
    def require_openai_key(cls) -> str:
        """Return the OpenAI key or raise if it is not configured."""
        if not cls.OPENAI_API_KEY:
            raise MissingCredentialError("OPENAI_API_KEY")
        return cls.OPENAI_API_KEY

    @classmethod
    def require_anthropic_key(cls) -> str:
        if not cls.ANTHROPIC_API_KEY:
            raise ConfigurationError(
                "ANTHROPIC_API_KEY environment variable not set (required for Claude summarization)"
            )
        return cls.ANTHROPIC_API_KEY


@dataclass
class UserConfig:
    """Defaults read from the optional config.toml."""
    default_lang: Optional[str] = None
    default_format: Optional[str] = None
    default_model: Optional[str] = None
    whisper_model: Optional[str] = None


def parse_user_config(text: str) -> UserConfig:
    """Parse config.toml content. Unknown keys are ignored."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid config file: {e}") from e

    values = {}
    for name in ("default_lang", "default_format", "default_model", "whisper_model"):
        value = data.get(name)
        if value is None:
            continue
        if not isinstance(value, str):
            raise ConfigurationError(f"Invalid config file: '{name}' must be a string")
        values[name] = value
    return UserConfig(**values)


def load_user_config(path: Optional[Path] = None) -> UserConfig:
    """Load config.toml if it exists, otherwise return empty defaults."""
    path = path or Config.CONFIG_PATH
    if not path.exists():
        return UserConfig()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Could not read config file {path}: {e}") from e
    return parse_user_config(text)
