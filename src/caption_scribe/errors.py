from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from caption_scribe.catalog import TranscriptCatalog


class CaptionError(Exception):
    def __init__(self, video_id: str | None, message: str = "") -> None:
        self.video_id = video_id
        super().__init__(message or self.default_message())

    def default_message(self) -> str:
        return f"Could not retrieve a transcript for video {self.video_id}"


class ConfigError(CaptionError):
    def __init__(self, message: str) -> None:
        super().__init__(None, message)


class RequestFailedError(CaptionError):
    def __init__(self, video_id: str, reason: str) -> None:
        self.reason = reason
        super().__init__(video_id, f"Request to YouTube failed for video {video_id}: {reason}")


class InvalidVideoIdError(CaptionError):
    def default_message(self) -> str:
        return (
            f"Invalid video id {self.video_id!r}. Pass the id (e.g. 'dQw4w9WgXcQ'), "
            "not the full video URL"
        )


class TooManyRequestsError(CaptionError):
    def default_message(self) -> str:
        return (
            f"YouTube answered with a CAPTCHA for video {self.video_id}. "
            "Too many requests were sent from this IP; back off and retry later"
        )


class VideoUnavailableError(CaptionError):
    def default_message(self) -> str:
        return f"Video {self.video_id} is no longer available"


class TranscriptsDisabledError(CaptionError):
    def default_message(self) -> str:
        return f"Subtitles are disabled for video {self.video_id}"


class NoTranscriptAvailableError(CaptionError):
    def default_message(self) -> str:
        return f"No transcripts are available for video {self.video_id}"


class ConsentCookieError(CaptionError):
    def default_message(self) -> str:
        return f"Failed to automatically give consent to saving cookies for video {self.video_id}"


class NotTranslatableError(CaptionError):
    def default_message(self) -> str:
        return f"The requested transcript of video {self.video_id} is not translatable"


class TranslationLanguageNotAvailableError(CaptionError):
    def __init__(self, video_id: str, language_code: str) -> None:
        self.language_code = language_code
        super().__init__(
            video_id,
            f"Translation language {language_code!r} is not available for video {video_id}",
        )


class NoTranscriptFoundError(CaptionError):
    def __init__(
        self,
        video_id: str,
        language_codes: Iterable[str],
        catalog: TranscriptCatalog | None = None,
    ) -> None:
        self.language_codes = tuple(language_codes)
        self.catalog = catalog
        message = (
            f"No transcript found for video {video_id} in any of the requested "
            f"languages: {', '.join(self.language_codes) or '(none)'}"
        )
        if catalog is not None:
            message = f"{message}\n\n{catalog}"
        super().__init__(video_id, message)


class TransportError(Exception):
    """Raised by a transport when no HTTP response could be obtained."""
