"""Transcript summarization using Anthropic Claude or OpenAI GPT."""

import logging
from typing import Any

import anthropic
from openai import OpenAI
from openai import OpenAIError

from ytx.config import Config
from ytx.errors import ConfigurationError, SummaryError
from ytx.models import Transcript

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-6"

SYSTEM_PROMPT = (
    "You are a helpful assistant that summarizes video transcripts. "
    "Provide a clear, structured summary that captures the key points, main arguments, "
    "and important details. Use bullet points for key takeaways."
)


def get_transcript_text(transcript: Transcript) -> str:
    """Join segment texts into one string."""
    return " ".join(segment.text for segment in transcript.segments)


def build_user_message(transcript: Transcript) -> str:
    return (
        f"Summarize this transcript from the video \"{transcript.title}\":\n\n"
        f"{get_transcript_text(transcript)}"
    )


def is_anthropic_model(model: str) -> bool:
    return model.startswith("claude")


def extract_anthropic_text(message: Any) -> str:
    """Concatenate the text blocks of a Messages API response."""
    parts = [
        block.text
        for block in (getattr(message, "content", None) or [])
        if getattr(block, "type", None) == "text"
    ]
    text = "".join(parts)
    if not text:
        raise SummaryError("unexpected Anthropic API response format")
    return text


def extract_openai_text(response: Any) -> str:
    choices = getattr(response, "choices", None) or []
    if choices:
        content = choices[0].message.content
        if content:
            return content
    raise SummaryError("unexpected OpenAI API response format")


def _summarize_anthropic(transcript: Transcript, model: str) -> str:
    client = anthropic.Anthropic(api_key=Config.require_anthropic_key())
    logger.debug("Summarizing via Anthropic API with model %s", model)
    try:
        message = client.messages.create(
            model=model,
            max_tokens=4096,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": build_user_message(transcript)}],
        )
    except anthropic.APIError as e:
        raise SummaryError(f"Anthropic API error: {e}") from e
    return extract_anthropic_text(message)


def _summarize_openai(transcript: Transcript, model: str) -> str:
    if not Config.OPENAI_API_KEY:
        raise ConfigurationError(
            "OPENAI_API_KEY environment variable not set (required for OpenAI summarization)"
        )
    client = OpenAI(api_key=Config.OPENAI_API_KEY, timeout=300.0)
    logger.debug("Summarizing via OpenAI API with model %s", model)
    try:
        response = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_message(transcript)},
            ],
        )
    except OpenAIError as e:
        raise SummaryError(f"OpenAI API error: {e}") from e
    return extract_openai_text(response)


def summarize(transcript: Transcript, model: str = DEFAULT_MODEL) -> str:
    """Summarize a transcript with the given LLM."""
    if is_anthropic_model(model):
        return _summarize_anthropic(transcript, model)
    return _summarize_openai(transcript, model)
