"""Scrape a YouTube watch page for the caption tracks it embeds.

The watch page is not an API: the caption metadata is a JSON object inlined in
a script tag, so it is located by plain string delimiters. When the delimiter
is missing, secondary markers on the page tell apart the reasons why.
"""

import html
import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from caption_scribe.catalog import TranscriptCatalog
from caption_scribe.errors import (
    CaptionError,
    ConsentCookieError,
    InvalidVideoIdError,
    NoTranscriptAvailableError,
    TooManyRequestsError,
    TranscriptsDisabledError,
    VideoUnavailableError,
)
from caption_scribe.transcript import ACCEPT_LANGUAGE
from caption_scribe.transport import Transport, send_request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageMarkers:
    watch_url: str = "https://www.youtube.com/watch?v={video_id}"
    captions_start: str = '"captions":'
    captions_end: str = ',"videoDetails'
    captions_renderer: str = "playerCaptionsTracklistRenderer"
    caption_tracks: str = "captionTracks"
    consent_form: str = 'action="https://consent.youtube.com/s"'
    consent_value: str = r'name="v" value="(.*?)"'
    consent_cookie: str = "CONSENT=YES+{value}; Domain=.youtube.com; Path=/; HttpOnly"
    captcha: str = 'class="g-recaptcha"'
    playability_status: str = '"playabilityStatus":'
    title: str = r'<meta name="title" content="(.*?)"'
    url_schemes: tuple[str, ...] = ("http://", "https://")


DEFAULT_MARKERS = PageMarkers()


def extract_captions_json(
    page: str, video_id: str, markers: PageMarkers = DEFAULT_MARKERS
) -> dict[str, Any]:
    """Cut the caption tracklist renderer out of a decoded watch page."""
    parts = page.split(markers.captions_start)
    if len(parts) <= 1:
        raise _classify_missing_captions(page, video_id, markers)

    island = parts[1].replace("\n", "").split(markers.captions_end)[0]
    try:
        captions = json.loads(island)
    except json.JSONDecodeError:
        logger.warning("Caption metadata is not valid JSON", extra={"video_id": video_id})
        captions = None

    renderer = captions.get(markers.captions_renderer) if isinstance(captions, dict) else None
    if not isinstance(renderer, dict):
        raise TranscriptsDisabledError(video_id)

    if renderer.get(markers.caption_tracks) is None:
        raise NoTranscriptAvailableError(video_id)

    return renderer


def _classify_missing_captions(page: str, video_id: str, markers: PageMarkers) -> CaptionError:
    if video_id.startswith(markers.url_schemes):
        return InvalidVideoIdError(video_id)
    if markers.captcha in page:
        return TooManyRequestsError(video_id)
    if markers.playability_status not in page:
        return VideoUnavailableError(video_id)
    return TranscriptsDisabledError(video_id)


def extract_video_title(page: str, markers: PageMarkers = DEFAULT_MARKERS) -> str:
    match = re.search(markers.title, page)
    return match.group(1) if match else ""


class CatalogFetcher:
    def __init__(self, transport: Transport, markers: PageMarkers = DEFAULT_MARKERS) -> None:
        self.transport = transport
        self.markers = markers

    def fetch(self, video_id: str) -> TranscriptCatalog:
        page = self._fetch_video_page(video_id)
        captions_json = extract_captions_json(page, video_id, self.markers)
        tracks = captions_json[self.markers.caption_tracks]
        logger.debug("Found caption tracks", extra={"video_id": video_id, "tracks": len(tracks)})
        return TranscriptCatalog.build(
            self.transport,
            video_id,
            captions_json,
            extract_video_title(page, self.markers),
        )

    def _fetch_video_page(self, video_id: str) -> str:
        page = self._fetch_html(video_id)
        if self.markers.consent_form not in page:
            return page

        match = re.search(self.markers.consent_value, page)
        if not match:
            raise ConsentCookieError(video_id)

        logger.debug("Retrying watch page with consent cookie", extra={"video_id": video_id})
        page = self._fetch_html(video_id, consent=match.group(1))
        if self.markers.consent_form in page:
            raise ConsentCookieError(video_id)
        return page

    def _fetch_html(self, video_id: str, consent: str | None = None) -> str:
        headers = {"Accept-Language": ACCEPT_LANGUAGE}
        if consent:
            headers["Set-Cookie"] = self.markers.consent_cookie.format(value=consent)

        url = self.markers.watch_url.format(video_id=video_id)
        response = send_request(self.transport, video_id, url, headers)
        return html.unescape(response.text)
