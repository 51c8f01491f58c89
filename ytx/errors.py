"""Exception taxonomy for transcript acquisition.

Category classes (input, transport, protocol, configuration, resource) say
*what kind* of failure happened; path classes (caption, whisper) say *where*.
Concrete errors inherit from one of each, so callers can catch either way.
"""

from typing import Optional


class TranscriptError(Exception):
    """Base class for every error raised by ytx."""

    #: Whether the retry wrapper may try the operation again.
    retryable = True


# Categories

class InputError(TranscriptError):
    """User input could not be turned into a video id."""
    retryable = False


class TransportError(TranscriptError):
    """HTTP or process I/O failure."""


class ProtocolError(TranscriptError):
    """A remote API answered with a shape we did not expect."""


class ConfigurationError(TranscriptError):
    """Missing credential or unreadable configuration."""
    retryable = False


class ResourceError(TranscriptError):
    """An external tool is missing or exited with an error."""
    retryable = False


# Caption path

class CaptionError(TranscriptError):
    """Failure while fetching platform captions."""


class PageFetchError(CaptionError, TransportError):
    pass


class KeyNotFoundError(CaptionError, ProtocolError):
    pass


class PlayerInfoError(CaptionError, ProtocolError):
    pass


class NoCaptionsError(CaptionError, ProtocolError):
    pass


class TrackFetchError(CaptionError, TransportError):
    pass


class MalformedCaptionsError(CaptionError, ProtocolError):
    pass


# Whisper path

class WhisperError(TranscriptError):
    """Failure while transcribing downloaded audio."""


class MissingCredentialError(WhisperError, ConfigurationError):
    def __init__(self, variable: str, purpose: str = "Whisper fallback"):
        self.variable = variable
        super().__init__(
            f"{variable} environment variable not set (required for {purpose}). "
            f"Set it in your environment or in a .env file."
        )


class DownloadFailedError(WhisperError, ResourceError):
    def __init__(self, message: str, binary_missing: bool = False):
        self.binary_missing = binary_missing
        super().__init__(message)


class ChunkSplitFailedError(WhisperError, ResourceError):
    pass


class AudioFileError(WhisperError, ResourceError):
    """A downloaded audio file or chunk could not be read."""


class WhisperApiError(WhisperError, TransportError):
    def __init__(self, status: Optional[int], body: str):
        self.status = status
        self.body = body
        if status is None:
            super().__init__(f"Whisper API request failed: {body}")
        else:
            super().__init__(f"Whisper API returned {status}: {body}")


class UnexpectedFormatError(WhisperError, ProtocolError):
    pass


# Orchestration and collaborators

class AcquisitionError(TranscriptError):
    """Every permitted acquisition path failed for a video."""
    retryable = False

    def __init__(self, video_id: str, path: str, cause: Exception):
        self.video_id = video_id
        self.path = path
        self.cause = cause
        where = {
            "captions": "caption extraction failed",
            "whisper": "Whisper transcription failed",
            "both": "caption extraction and Whisper fallback both failed",
        }.get(path, f"{path} failed")
        super().__init__(f"{video_id}: {where}: {cause}")


class SummaryError(TranscriptError):
    """The summarization request failed."""
