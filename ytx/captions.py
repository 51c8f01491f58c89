"""Fetch YouTube's built-in captions through the InnerTube player API."""

import html
import logging
import re
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional

import requests

from ytx.errors import (
    KeyNotFoundError,
    MalformedCaptionsError,
    NoCaptionsError,
    PageFetchError,
    PlayerInfoError,
    TrackFetchError,
)
from ytx.models import CaptionTrack, Segment, Transcript, TranscriptSource
from ytx.video_id import watch_url

logger = logging.getLogger(__name__)

# The watch page only embeds the API key for desktop browser user agents.
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)
PLAYER_URL = "https://www.youtube.com/youtubei/v1/player"
CLIENT_NAME = "WEB"
CLIENT_VERSION = "2.20241126.01.00"
REQUEST_TIMEOUT = 30

_API_KEY_PATTERNS = [
    re.compile(r'"INNERTUBE_API_KEY"\s*:\s*"([^"]+)"'),
    re.compile(r'innertubeApiKey\s*[=:]\s*"([^"]+)"'),
]


def new_session() -> requests.Session:
    s = requests.Session()
    s.headers.update({"User-Agent": USER_AGENT})
    return s


def extract_api_key(page_html: str) -> str:
    """Find the InnerTube API key in the watch page's inline scripts."""
    for pattern in _API_KEY_PATTERNS:
        match = pattern.search(page_html)
        if match:
            return match.group(1)
    raise KeyNotFoundError("could not extract InnerTube API key from watch page")


def player_request_body(video_id: str, lang: str) -> Dict[str, Any]:
    return {
        "context": {
            "client": {
                "hl": lang,
                "gl": "US",
                "clientName": CLIENT_NAME,
                "clientVersion": CLIENT_VERSION,
            }
        },
        "videoId": video_id,
    }


def parse_caption_tracks(player: Dict[str, Any]) -> List[CaptionTrack]:
    """Read captions.playerCaptionsTracklistRenderer.captionTracks, in API order."""
    captions = player.get("captions") or {}
    renderer = captions.get("playerCaptionsTracklistRenderer") or {}
    raw_tracks = renderer.get("captionTracks") or []

    tracks = []
    for raw in raw_tracks:
        base_url = raw.get("baseUrl") if isinstance(raw, dict) else None
        language_code = raw.get("languageCode") if isinstance(raw, dict) else None
        if not isinstance(base_url, str) or not isinstance(language_code, str):
            logger.debug("Skipping caption track without baseUrl/languageCode: %r", raw)
            continue
        tracks.append(CaptionTrack(language_code=language_code, base_url=base_url))
    return tracks


def parse_title(player: Dict[str, Any]) -> str:
    details = player.get("videoDetails") or {}
    title = details.get("title")
    return title if isinstance(title, str) else ""


def select_track(tracks: List[CaptionTrack], lang: str) -> Optional[CaptionTrack]:
    """Exact language match wins, otherwise the first track. None if empty."""
    for track in tracks:
        if track.language_code == lang:
            return track
    return tracks[0] if tracks else None


def _parse_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def parse_caption_xml(xml_text: str) -> List[Segment]:
    """
    Decode a timed-text document into segments.

    Each <text start="S" dur="D">TEXT</text> becomes one Segment. TEXT is
    HTML-unescaped after XML parsing, which handles the doubly escaped
    entities YouTube sends (&amp;#39; -> ') and strips surrounding whitespace.
    Cues without text or without parseable timing are dropped.
    """
    if not xml_text.strip():
        return []

    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise MalformedCaptionsError(f"error parsing caption XML: {e}") from e

    segments = []
    for element in root.iter("text"):
        start = _parse_float(element.get("start"))
        duration = _parse_float(element.get("dur"))
        if start is None or duration is None:
            continue

        raw_text = "".join(element.itertext())
        text = html.unescape(raw_text).strip()
        if not text:
            continue

        segments.append(Segment(text=text, start=start, duration=duration))

    return segments


def _fetch_player(session: requests.Session, video_id: str, lang: str, api_key: str) -> Dict[str, Any]:
    try:
        resp = session.post(
            PLAYER_URL,
            params={"key": api_key, "prettyPrint": "false"},
            json=player_request_body(video_id, lang),
            headers={"User-Agent": USER_AGENT, "Content-Type": "application/json"},
            timeout=REQUEST_TIMEOUT,
        )
        resp.raise_for_status()
        player = resp.json()
    except (requests.RequestException, ValueError) as e:
        raise PlayerInfoError(f"player request failed for {video_id}: {e}") from e

    if not isinstance(player, dict):
        raise PlayerInfoError(f"player response for {video_id} is not a JSON object")
    return player


def fetch_captions(
    video_id: str,
    lang: str,
    session: Optional[requests.Session] = None,
) -> Transcript:
    """
    Fetch the caption transcript for a video.

    Steps: scrape the watch page for the API key, ask the player endpoint for
    the caption track list, pick a track, download and decode its XML. The
    returned transcript's language is the chosen track's, which may differ
    from `lang` when no exact match exists.
    """
    session = session or new_session()

    url = watch_url(video_id)
    logger.debug("Fetching watch page: %s", url)
    try:
        resp = session.get(url, headers={"User-Agent": USER_AGENT}, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
        page_html = resp.text
    except requests.RequestException as e:
        raise PageFetchError(f"could not fetch watch page for {video_id}: {e}") from e

    api_key = extract_api_key(page_html)
    logger.debug("Extracted InnerTube API key")

    player = _fetch_player(session, video_id, lang, api_key)
    title = parse_title(player)

    track = select_track(parse_caption_tracks(player), lang)
    if track is None:
        raise NoCaptionsError(f"no captions available for video {video_id}")
    logger.debug("Using caption track: lang=%s", track.language_code)

    try:
        resp = session.get(track.base_url, headers={"User-Agent": USER_AGENT}, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
        caption_xml = resp.text
    except requests.RequestException as e:
        raise TrackFetchError(f"could not fetch caption track for {video_id}: {e}") from e

    segments = parse_caption_xml(caption_xml)
    logger.debug("Decoded %d caption segments for %s", len(segments), video_id)

    return Transcript(
        video_id=video_id,
        title=title,
        language=track.language_code,
        source=TranscriptSource.CAPTION,
        segments=segments,
    )
