"""Convert the timedtext XML served for a caption track into segments."""

import html
import logging
import re

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import Tag

from caption_scribe.types import Segment

logger = logging.getLogger(__name__)

ROOT_ELEMENT = "transcript"
TEXT_ELEMENT = "text"
START_ATTRIBUTE = "start"
DURATION_ATTRIBUTE = "dur"

FORMATTING_TAGS = (
    "strong",  # important
    "em",  # emphasized
    "b",  # bold
    "i",  # italic
    "mark",  # marked
    "small",  # smaller
    "del",  # deleted
    "ins",  # inserted
    "sub",  # subscript
    "sup",  # superscript
)

_ANY_TAG = re.compile(r"<[^>]*>")
_NON_FORMATTING_TAG = re.compile(
    r"</?(?!/?(?:{})\b)[^>]*>".format("|".join(FORMATTING_TAGS)),
    re.IGNORECASE,
)


def parse_segments(raw_xml: str, preserve_formatting: bool = False) -> list[Segment]:
    """Parse a caption track body into segments in document order.

    Malformed markup is repaired as far as the parser can; whatever cannot be
    recovered yields no segments rather than an error.
    """
    if not raw_xml.strip():
        return []

    tag_pattern = _NON_FORMATTING_TAG if preserve_formatting else _ANY_TAG

    try:
        soup = BeautifulSoup(raw_xml, "xml")
    except ParserRejectedMarkup:
        logger.warning("Caption body could not be parsed")
        return []

    root = soup.find(ROOT_ELEMENT)
    if not isinstance(root, Tag):
        logger.warning("Caption body has no <%s> root", ROOT_ELEMENT)
        return []

    segments: list[Segment] = []
    for node in root.find_all(TEXT_ELEMENT, recursive=False):
        inner = html.unescape(node.decode_contents())
        segments.append(
            Segment(
                text=tag_pattern.sub("", inner),
                start=_to_float(node.get(START_ATTRIBUTE)),
                duration=_to_float(node.get(DURATION_ATTRIBUTE)),
            )
        )
    return segments


def _to_float(value: object) -> float:
    if not isinstance(value, str):
        return 0.0
    try:
        return float(value)
    except ValueError:
        return 0.0
