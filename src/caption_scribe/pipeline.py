import asyncio
import logging
from collections.abc import Callable, Sequence

from caption_scribe.catalog import TranscriptCatalog
from caption_scribe.config import DEFAULT_CONCURRENCY, DEFAULT_LANGUAGES
from caption_scribe.errors import CaptionError
from caption_scribe.fetcher import CatalogFetcher
from caption_scribe.transport import HttpxTransport, Transport
from caption_scribe.types import Segment, VideoTranscript

logger = logging.getLogger(__name__)


def fetch_catalog(video_id: str, transport: Transport | None = None) -> TranscriptCatalog:
    """List every caption track available for ``video_id``.

    Without a ``transport`` a default ``HttpxTransport`` is created and left
    open, since the returned handles fetch through it later. Callers that need
    the connection closed should pass their own transport and use it as a
    context manager.
    """
    return CatalogFetcher(transport or HttpxTransport()).fetch(video_id)


def fetch_transcript(
    video_id: str,
    transport: Transport,
    languages: Sequence[str] = DEFAULT_LANGUAGES,
    translate_to: str | None = None,
    preserve_formatting: bool = False,
) -> tuple[str, list[Segment]]:
    """Fetch the best-matching transcript and return ``(language_code, segments)``."""
    transcript = fetch_catalog(video_id, transport).find(languages)
    if translate_to is not None and translate_to != transcript.language_code:
        transcript = transcript.translate(translate_to)
    return transcript.language_code, transcript.fetch(preserve_formatting)


async def fetch_transcript_batch(
    video_ids: Sequence[str],
    transport: Transport,
    languages: Sequence[str] = DEFAULT_LANGUAGES,
    translate_to: str | None = None,
    preserve_formatting: bool = False,
    concurrency: int = DEFAULT_CONCURRENCY,
    on_result: Callable[[VideoTranscript], None] | None = None,
) -> list[VideoTranscript]:
    semaphore = asyncio.Semaphore(concurrency)
    results: list[VideoTranscript | None] = [None] * len(video_ids)

    async def process(index: int, video_id: str) -> None:
        async with semaphore:
            try:
                language_code, segments = await asyncio.to_thread(
                    fetch_transcript,
                    video_id,
                    transport,
                    languages,
                    translate_to,
                    preserve_formatting,
                )
            except CaptionError as e:
                logger.info("Skipping video", extra={"video_id": video_id, "error": str(e)})
                result = VideoTranscript(video_id=video_id, error=e)
            else:
                result = VideoTranscript(
                    video_id=video_id, segments=segments, language_code=language_code
                )
            results[index] = result
            if on_result is not None:
                on_result(result)

    async with asyncio.TaskGroup() as tg:
        for i, video_id in enumerate(video_ids):
            tg.create_task(process(i, video_id))

    return [r for r in results if r is not None]
