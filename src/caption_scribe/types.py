from dataclasses import dataclass

from caption_scribe.errors import CaptionError


@dataclass(frozen=True)
class Segment:
    text: str
    start: float
    duration: float = 0.0

    @property
    def end(self) -> float:
        return self.start + self.duration

    def to_dict(self) -> dict[str, str | float]:
        return {"text": self.text, "start": self.start, "duration": self.duration}


@dataclass(frozen=True)
class TranslationLanguage:
    language: str
    language_code: str

    def __str__(self) -> str:
        return f'{self.language_code} ("{self.language}")'


@dataclass(frozen=True)
class Response:
    status_code: int
    reason_phrase: str = ""
    body: bytes = b""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class VideoTranscript:
    video_id: str
    segments: list[Segment] | None = None
    language_code: str | None = None
    error: CaptionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
