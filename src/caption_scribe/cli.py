import asyncio
import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from caption_scribe.config import Config, load_config
from caption_scribe.errors import CaptionError, ConfigError
from caption_scribe.pipeline import fetch_catalog, fetch_transcript, fetch_transcript_batch
from caption_scribe.transport import HttpxTransport
from caption_scribe.types import Segment, VideoTranscript

console = Console()


def _format_timestamp(seconds: float) -> str:
    minutes, secs = divmod(seconds, 60)
    return f"{int(minutes):02d}:{secs:05.2f}"


def _format_text_output(segments: list[Segment], timestamps: bool) -> str:
    if timestamps:
        return "\n".join(
            f"[{_format_timestamp(seg.start)} - {_format_timestamp(seg.end)}] {seg.text}"
            for seg in segments
        )
    return "\n".join(seg.text for seg in segments)


def _format_json_output(video_id: str, language_code: str, segments: list[Segment]) -> str:
    data = {
        "video_id": video_id,
        "language_code": language_code,
        "segments": [seg.to_dict() for seg in segments],
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def _render(
    video_id: str,
    language_code: str,
    segments: list[Segment],
    output_format: str,
    timestamps: bool,
) -> str:
    if output_format == "json":
        return _format_json_output(video_id, language_code, segments)
    return _format_text_output(segments, timestamps)


def _load_config() -> Config:
    try:
        return load_config()
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)


def _output_path_for(video_id: str, output_folder: Path, output_format: str) -> Path:
    suffix = "json" if output_format == "json" else "txt"
    return output_folder / f"{video_id}.{suffix}"


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log requests and extraction steps")
def main(verbose: bool) -> None:
    """Download YouTube captions without an API key."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


@main.command("list")
@click.argument("video_id")
def list_transcripts(video_id: str) -> None:
    """List the caption tracks available for VIDEO_ID."""
    config = _load_config()
    try:
        with HttpxTransport(timeout=config.timeout, retries=config.retries) as transport:
            catalog = fetch_catalog(video_id, transport)
    except CaptionError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)

    if catalog.video_title:
        console.print(f"[bold]{escape(catalog.video_title)}[/bold]")
    console.print(str(catalog), markup=False, highlight=False)


@main.command()
@click.argument("video_ids", nargs=-1, required=True)
@click.option("-l", "--lang", "languages", multiple=True, help="Preferred language code, in order")
@click.option("--translate", "translate_to", default=None, help="Translate into this language code")
@click.option("--preserve-formatting", is_flag=True, help="Keep inline HTML formatting")
@click.option("--timestamps", is_flag=True, help="Prefix each line with its time range")
@click.option("-o", "--output-format", type=click.Choice(["text", "json"]), default="text")
@click.option("--output-folder", type=click.Path(path_type=Path), default=None, help="Write files here")
@click.option("--concurrency", type=int, default=None, help="Max parallel downloads")
def fetch(
    video_ids: tuple[str, ...],
    languages: tuple[str, ...],
    translate_to: str | None,
    preserve_formatting: bool,
    timestamps: bool,
    output_format: str,
    output_folder: Path | None,
    concurrency: int | None,
) -> None:
    """Fetch transcripts for one or more VIDEO_IDS.

    The first language (in --lang order) that the video offers is used.
    """
    config = _load_config()

    effective_languages = languages or config.languages
    effective_formatting = preserve_formatting or config.preserve_formatting
    effective_concurrency = concurrency or config.concurrency

    if output_folder is not None:
        output_folder.mkdir(parents=True, exist_ok=True)

    with HttpxTransport(timeout=config.timeout, retries=config.retries) as transport:
        if len(video_ids) == 1:
            video_id = video_ids[0]
            try:
                language_code, segments = fetch_transcript(
                    video_id, transport, effective_languages, translate_to, effective_formatting
                )
            except CaptionError as e:
                console.print(f"[red]Error:[/red] {escape(str(e))}")
                raise SystemExit(1)
            output = _render(video_id, language_code, segments, output_format, timestamps)
            if output_folder is None:
                click.echo(output)
            else:
                out_path = _output_path_for(video_id, output_folder, output_format)
                out_path.write_text(output, encoding="utf-8")
                console.print(f"Output written to [bold]{out_path}[/bold]")
            return

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Fetching transcripts", total=len(video_ids))
            results = asyncio.run(
                fetch_transcript_batch(
                    list(video_ids),
                    transport,
                    effective_languages,
                    translate_to,
                    effective_formatting,
                    effective_concurrency,
                    on_result=lambda _: progress.advance(task),
                )
            )

    _write_batch(results, output_format, timestamps, output_folder)

    if not all(r.ok for r in results):
        raise SystemExit(1)


def _write_batch(
    results: list[VideoTranscript],
    output_format: str,
    timestamps: bool,
    output_folder: Path | None,
) -> None:
    for result in results:
        if not result.ok:
            error = escape(str(result.error))
            console.print(f"  [bold]{result.video_id}[/bold] [red]failed:[/red] {error}")
            continue

        output = _render(
            result.video_id,
            result.language_code or "",
            result.segments or [],
            output_format,
            timestamps,
        )
        if output_folder is None:
            click.echo(f"# {result.video_id}")
            click.echo(output)
        else:
            out_path = _output_path_for(result.video_id, output_folder, output_format)
            out_path.write_text(output, encoding="utf-8")
            console.print(f"  [bold]{result.video_id}[/bold] → {out_path}")
