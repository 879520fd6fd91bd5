import pytest

from caption_scribe.parser import FORMATTING_TAGS, parse_segments
from caption_scribe.types import Segment

from .conftest import CAPTION_XML


def test_parse_without_formatting() -> None:
    xml = """<transcript>
    <text start="0.0" dur="1.5">Hello, world!</text>
    <text start="1.5" dur="2.0">Welcome to testing.</text>
</transcript>"""

    assert parse_segments(xml) == [
        Segment(text="Hello, world!", start=0.0, duration=1.5),
        Segment(text="Welcome to testing.", start=1.5, duration=2.0),
    ]


def test_parse_keeps_document_order() -> None:
    segments = parse_segments(CAPTION_XML)

    assert [s.start for s in segments] == [0.0, 1.54, 5.7]
    assert segments[0].text == "Hey, this is just a test"
    assert segments[2].duration == 3.239


def test_parse_preserves_allowed_formatting() -> None:
    xml = """<transcript>
    <text start="0.0" dur="1.5">Hello, <b>world</b>!</text>
    <text start="1.5" dur="2.0">Welcome to <i>testing</i>.</text>
</transcript>"""

    segments = parse_segments(xml, preserve_formatting=True)

    assert [s.text for s in segments] == ["Hello, <b>world</b>!", "Welcome to <i>testing</i>."]


def test_parse_strips_unknown_tags() -> None:
    xml = """<transcript>
    <text start="0.0" dur="1.5">Hello, <custom>world</custom>!</text>
    <text start="1.5" dur="2.0">Welcome to <unknown>testing</unknown>.</text>
</transcript>"""

    segments = parse_segments(xml, preserve_formatting=True)

    assert [s.text for s in segments] == ["Hello, world!", "Welcome to testing."]


def test_parse_strips_escaped_markup() -> None:
    segments = parse_segments(CAPTION_XML)

    assert segments[1].text == "this is not the original transcript"
    assert all("<" not in s.text for s in segments)


def test_parse_preserves_escaped_formatting_markup() -> None:
    segments = parse_segments(CAPTION_XML, preserve_formatting=True)

    assert segments[1].text == "this is <i>not</i> the original transcript"


def test_preserve_formatting_strips_attributed_and_self_closing_tags() -> None:
    xml = (
        '<transcript><text start="1" dur="2">'
        '&lt;font color="#E5E5E5"&gt;<strong>loud</strong>&lt;/font&gt;&lt;br/&gt;'
        '<em>quiet</em></text></transcript>'
    )

    segments = parse_segments(xml, preserve_formatting=True)

    assert segments[0].text == "<strong>loud</strong><em>quiet</em>"


def test_preserve_formatting_is_case_insensitive() -> None:
    xml = '<transcript><text start="1" dur="2">&lt;B&gt;big&lt;/B&gt; &lt;SPAN&gt;x&lt;/SPAN&gt;</text></transcript>'

    segments = parse_segments(xml, preserve_formatting=True)

    assert segments[0].text == "<B>big</B> x"


def test_preserve_formatting_keeps_literal_tag_case() -> None:
    xml = '<transcript><text start="0" dur="1">a <B>b</B> <Span x="1">c</Span></text></transcript>'

    assert parse_segments(xml, preserve_formatting=True)[0].text == "a <B>b</B> c"
    assert parse_segments(xml)[0].text == "a b c"


def test_strip_mode_removes_formatting_tags() -> None:
    xml = '<transcript><text start="1" dur="2"><b>bold</b> and <sup>up</sup></text></transcript>'

    assert parse_segments(xml)[0].text == "bold and up"


@pytest.mark.parametrize("tag", FORMATTING_TAGS)
def test_every_formatting_tag_survives(tag: str) -> None:
    xml = f'<transcript><text start="0" dur="1">a <{tag}>b</{tag}> c</text></transcript>'

    assert parse_segments(xml, preserve_formatting=True)[0].text == f"a <{tag}>b</{tag}> c"


def test_parse_decodes_entities() -> None:
    xml = '<transcript><text start="0" dur="1">I&#39;m &quot;here&quot; &amp; there</text></transcript>'

    assert parse_segments(xml)[0].text == "I'm \"here\" & there"


def test_missing_attributes_default_to_zero() -> None:
    xml = '<transcript><text>no timing</text><text start="2.5">no duration</text></transcript>'

    segments = parse_segments(xml)

    assert segments == [
        Segment(text="no timing", start=0.0, duration=0.0),
        Segment(text="no duration", start=2.5, duration=0.0),
    ]


def test_non_numeric_attributes_default_to_zero() -> None:
    xml = '<transcript><text start="soon" dur="1,5">odd</text></transcript>'

    assert parse_segments(xml) == [Segment(text="odd", start=0.0, duration=0.0)]


@pytest.mark.parametrize("raw", ["", "   ", "\n\t\n"])
def test_empty_input_yields_no_segments(raw: str) -> None:
    assert parse_segments(raw) == []


def test_unparseable_input_yields_no_segments() -> None:
    assert parse_segments("this is not xml at all") == []


def test_document_without_text_elements_yields_no_segments() -> None:
    assert parse_segments("<transcript></transcript>") == []


def test_malformed_xml_does_not_raise() -> None:
    xml = """<transcript>
    <text start="0.0" dur="1.5">Hello, world!</text>
    <text start="1.5" dur="2.0">Welcome to testing.
</transcript>"""

    segments = parse_segments(xml)

    assert segments[0] == Segment(text="Hello, world!", start=0.0, duration=1.5)
