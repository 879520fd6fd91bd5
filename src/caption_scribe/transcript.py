import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from caption_scribe.errors import NotTranslatableError, TranslationLanguageNotAvailableError
from caption_scribe.parser import parse_segments
from caption_scribe.transport import Transport, send_request
from caption_scribe.types import Segment, TranslationLanguage

logger = logging.getLogger(__name__)

ACCEPT_LANGUAGE = "en-US"
TRANSLATION_PARAM = "tlang"


@dataclass(frozen=True)
class Transcript:
    """A single caption track of a video.

    Instances are created by ``TranscriptCatalog.build`` or ``translate``.
    """

    transport: Transport = field(repr=False, compare=False)
    video_id: str
    source_url: str
    language: str
    language_code: str
    is_generated: bool
    translation_languages: tuple[TranslationLanguage, ...] = ()
    _translations: Mapping[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        translations = {t.language_code: t.language for t in self.translation_languages}
        object.__setattr__(self, "_translations", MappingProxyType(translations))

    def fetch(self, preserve_formatting: bool = False) -> list[Segment]:
        response = send_request(
            self.transport,
            self.video_id,
            self.source_url,
            {"Accept-Language": ACCEPT_LANGUAGE},
        )
        segments = parse_segments(response.text, preserve_formatting)
        logger.debug(
            "Parsed caption track",
            extra={
                "video_id": self.video_id,
                "language_code": self.language_code,
                "segments": len(segments),
            },
        )
        return segments

    def is_translatable(self) -> bool:
        return bool(self.translation_languages)

    def translate(self, language_code: str) -> "Transcript":
        if not self.is_translatable():
            raise NotTranslatableError(self.video_id)

        if language_code not in self._translations:
            raise TranslationLanguageNotAvailableError(self.video_id, language_code)

        return Transcript(
            transport=self.transport,
            video_id=self.video_id,
            source_url=f"{self.source_url}&{TRANSLATION_PARAM}={language_code}",
            language=self._translations[language_code],
            language_code=language_code,
            is_generated=True,
        )

    def __str__(self) -> str:
        suffix = "[TRANSLATABLE]" if self.is_translatable() else ""
        return f'{self.language_code} ("{self.language}"){suffix}'
