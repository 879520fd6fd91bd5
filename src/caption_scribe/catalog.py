from collections.abc import Iterable, Iterator, Mapping, Sequence
from types import MappingProxyType
from typing import Any

from caption_scribe.errors import NoTranscriptFoundError
from caption_scribe.transcript import Transcript
from caption_scribe.transport import Transport
from caption_scribe.types import TranslationLanguage

GENERATED_KIND = "asr"


def _display_text(node: Any) -> str:
    """Read a ``{"simpleText": ...}`` or ``{"runs": [{"text": ...}]}`` label."""
    if not isinstance(node, dict):
        return ""
    if "simpleText" in node:
        return str(node["simpleText"])
    return "".join(str(run.get("text", "")) for run in node.get("runs", []))


class TranscriptCatalog:
    """All caption tracks YouTube lists for one video.

    Iterating yields manually created transcripts first, then generated ones,
    each in the order YouTube returned them.
    """

    def __init__(
        self,
        video_id: str,
        manually_created: Mapping[str, Transcript],
        generated: Mapping[str, Transcript],
        translation_languages: Sequence[TranslationLanguage],
        video_title: str = "",
    ) -> None:
        self.video_id = video_id
        self.manually_created = MappingProxyType(dict(manually_created))
        self.generated = MappingProxyType(dict(generated))
        self.translation_languages = tuple(translation_languages)
        self.video_title = video_title

    @classmethod
    def build(
        cls,
        transport: Transport,
        video_id: str,
        captions_json: Mapping[str, Any],
        video_title: str = "",
    ) -> "TranscriptCatalog":
        translation_languages = tuple(
            TranslationLanguage(
                language=_display_text(entry.get("languageName")),
                language_code=entry["languageCode"],
            )
            for entry in captions_json.get("translationLanguages", [])
        )

        manually_created: dict[str, Transcript] = {}
        generated: dict[str, Transcript] = {}

        for caption in captions_json["captionTracks"]:
            is_generated = caption.get("kind", "") == GENERATED_KIND
            # Unflagged tracks share the video-wide translation targets.
            translatable = caption.get("isTranslatable", True)
            transcript = Transcript(
                transport=transport,
                video_id=video_id,
                source_url=caption["baseUrl"],
                language=_display_text(caption.get("name")),
                language_code=caption["languageCode"],
                is_generated=is_generated,
                translation_languages=translation_languages if translatable else (),
            )
            if is_generated:
                generated[transcript.language_code] = transcript
            else:
                manually_created[transcript.language_code] = transcript

        return cls(video_id, manually_created, generated, translation_languages, video_title)

    def __iter__(self) -> Iterator[Transcript]:
        yield from self.manually_created.values()
        yield from self.generated.values()

    def iterate(self) -> list[Transcript]:
        return list(self)

    def available_language_codes(self) -> list[str]:
        return [transcript.language_code for transcript in self]

    def find(self, language_codes: Iterable[str]) -> Transcript:
        """Return the first transcript matching the caller's language preference.

        Codes are tried in the given order; for each code manually created
        transcripts are checked before generated ones.
        """
        return self._find(language_codes, (self.manually_created, self.generated))

    def find_generated(self, language_codes: Iterable[str]) -> Transcript:
        return self._find(language_codes, (self.generated,))

    def find_manually_created(self, language_codes: Iterable[str]) -> Transcript:
        return self._find(language_codes, (self.manually_created,))

    def _find(
        self,
        language_codes: Iterable[str],
        partitions: Sequence[Mapping[str, Transcript]],
    ) -> Transcript:
        codes = tuple(language_codes)
        for language_code in codes:
            for partition in partitions:
                if language_code in partition:
                    return partition[language_code]

        raise NoTranscriptFoundError(self.video_id, codes, self)

    def __str__(self) -> str:
        return (
            f"For this video ({self.video_id}) transcripts are available in the "
            "following languages:\n\n"
            f"(MANUALLY CREATED)\n{_describe(self.manually_created.values())}\n\n"
            f"(GENERATED)\n{_describe(self.generated.values())}\n\n"
            f"(TRANSLATION LANGUAGES)\n{_describe(self.translation_languages)}"
        )


def _describe(items: Iterable[object]) -> str:
    return "\n".join(f" - {item}" for item in items) or "None"
