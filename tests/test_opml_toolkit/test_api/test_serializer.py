"""Tests for OPML serialization."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from opml_toolkit.api.parser import parse_file, parse_string
from opml_toolkit.api.serializer import OPMLSerializer, serialize
from opml_toolkit.model import Document, Outline
from opml_toolkit.shared import OPMLConfig

FIXTURES = Path(__file__).parent.parent / "fixtures"

EXPECTED_SMALL = """<?xml version="1.0" encoding="UTF-8"?>
<opml version="2.0">
  <head>
    <title>Feeds</title>
  </head>
  <body>
    <outline text="A" title="A" xmlUrl="https://a/feed" />
    <outline text="Folder" title="Folder">
      <outline text="B" title="B" />
    </outline>
  </body>
</opml>
"""


def _small_document() -> Document:
    return Document(
        title="Feeds",
        outlines=[
            Outline(text="A", title="A", attributes=[("xmlUrl", "https://a/feed")]),
            Outline(text="Folder", title="Folder", children=[Outline(text="B", title="B")]),
        ],
    )


def _strip_text_and_title(outline: Outline) -> Outline:
    attributes = [a for a in outline.attributes or () if a.name not in ("text", "title")]
    return Outline(
        text=outline.text,
        title=outline.title,
        attributes=attributes or None,
        children=(
            None if outline.children is None
            else [_strip_text_and_title(c) for c in outline.children]
        ),
    )


class TestSerializerOutput:
    """Test the exact shape of serialized documents."""

    def test_small_document(self) -> None:
        """Test the complete output for a small nested document."""
        assert serialize(_small_document()) == EXPECTED_SMALL

    def test_empty_document(self) -> None:
        """Test that head and body are always written."""
        xml = serialize(Document())

        assert xml == (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<opml version="2.0">\n'
            "  <head>\n"
            "  </head>\n"
            "  <body>\n"
            "  </body>\n"
            "</opml>\n"
        )

    def test_header_fields_in_canonical_order(self) -> None:
        """Test header element order and date formatting."""
        document = Document(
            docs="http://opml.org/spec2.opml",
            owner_id="https://example.com/me",
            owner_email="me@example.com",
            owner_name="Me",
            date_modified=datetime(2024, 1, 3, 4, 5, 6, tzinfo=timezone.utc),
            date_created=datetime(1995, 11, 20, 19, 12, 8, tzinfo=timezone(timedelta(hours=-5))),
            title="Ordered",
        )

        lines = serialize(document).splitlines()

        assert lines[2:10] == [
            "  <head>",
            "    <title>Ordered</title>",
            "    <dateCreated>Mon, 20 Nov 1995 19:12:08 -0500</dateCreated>",
            "    <dateModified>Wed, 03 Jan 2024 04:05:06 +0000</dateModified>",
            "    <ownerName>Me</ownerName>",
            "    <ownerEmail>me@example.com</ownerEmail>",
            "    <ownerId>https://example.com/me</ownerId>",
            "    <docs>http://opml.org/spec2.opml</docs>",
        ]

    def test_absent_header_fields_are_omitted(self) -> None:
        """Test that only present header fields are written."""
        xml = serialize(Document(owner_name="Only"))

        assert "<ownerName>Only</ownerName>" in xml
        assert "<title>" not in xml
        assert "<dateCreated>" not in xml

    @pytest.mark.parametrize("children", [None, ()])
    def test_childless_outlines_self_close(self, children) -> None:
        """Test that absent and empty children both produce an empty element."""
        document = Document(outlines=[Outline(text="Leaf", title="Leaf", children=children)])

        assert '    <outline text="Leaf" title="Leaf" />' in serialize(document).splitlines()

    def test_text_and_title_are_always_written(self) -> None:
        """Test that text and title precede the attribute list even when repeated there."""
        outline = Outline(
            text="Blog",
            title="Blog",
            attributes=[("type", "rss"), ("text", "Blog"), ("title", "Blog")],
        )

        xml = serialize(Document(outlines=[outline]))

        assert (
            '<outline text="Blog" title="Blog" type="rss" text="Blog" title="Blog" />'
            in xml
        )

    def test_attribute_order_is_preserved(self) -> None:
        """Test that attributes are written in list order."""
        outline = Outline(attributes=[("z", "1"), ("a", "2"), ("m", "3")])

        assert '<outline text="" title="" z="1" a="2" m="3" />' in serialize(Document(outlines=[outline]))

    def test_escaping(self) -> None:
        """Test that special characters are escaped everywhere."""
        document = Document(
            version="2.0",
            title="Test & Special <XML> \"Characters\"",
            outlines=[Outline(
                text="Tom & Jerry's <Show>",
                title="\"Quoted\" & 'apostrophes'",
                attributes=[("xmlUrl", "https://example.com/feed?a=1&b=2")],
            )],
        )

        xml = serialize(document)

        assert "<title>Test &amp; Special &lt;XML&gt; &quot;Characters&quot;</title>" in xml
        assert 'text="Tom &amp; Jerry&apos;s &lt;Show&gt;"' in xml
        assert 'title="&quot;Quoted&quot; &amp; &apos;apostrophes&apos;"' in xml
        assert 'xmlUrl="https://example.com/feed?a=1&amp;b=2"' in xml

        parsed = parse_string(xml)
        assert parsed.title == document.title
        assert parsed.outlines[0].text == "Tom & Jerry's <Show>"
        assert parsed.outlines[0].title == "\"Quoted\" & 'apostrophes'"
        assert parsed.outlines[0].feed_url == "https://example.com/feed?a=1&b=2"


class TestWriterConfig:
    """Test writer configuration options."""

    def test_indent_width(self) -> None:
        """Test custom indentation."""
        config = OPMLConfig().override(writer__indent_width=4)

        lines = serialize(_small_document(), config).splitlines()

        assert lines[2] == "    <head>"
        assert lines[3] == "        <title>Feeds</title>"
        assert lines[8] == "            <outline text=\"B\" title=\"B\" />"

    def test_without_declaration(self) -> None:
        """Test omitting the XML declaration."""
        config = OPMLConfig().override(writer__xml_declaration=False)

        xml = serialize(_small_document(), config)

        assert xml.startswith('<opml version="2.0">\n')
        assert xml == EXPECTED_SMALL.split("\n", 1)[1]

    def test_serializer_instance_and_to_xml(self) -> None:
        """Test the class API and the document convenience method."""
        document = _small_document()

        assert OPMLSerializer().serialize(document) == EXPECTED_SMALL
        assert document.to_xml() == EXPECTED_SMALL


class TestRoundTrip:
    """Test that serialized documents parse back to equal documents."""

    def test_header_round_trip(self) -> None:
        """Test that every header field survives a round trip."""
        document = Document(
            version="1.0",
            title="Round trip",
            date_created=datetime(2005, 6, 18, 12, 11, 52, tzinfo=timezone.utc),
            date_modified=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=2))),
            owner_name="Owner",
            owner_email="owner@example.com",
            owner_id="https://example.com/owner",
            docs="http://opml.org/spec2.opml",
        )

        assert parse_string(serialize(document)) == document

    def test_outline_round_trip(self) -> None:
        """Test that outlines without repeated text and title survive a round trip."""
        document = _small_document()

        parsed = parse_string(serialize(document))
        stripped = parsed.replace(outlines=[_strip_text_and_title(o) for o in parsed.outlines])

        assert stripped == document

    def test_fixture_content_survives_after_normalizing(self) -> None:
        """Test re-serializing a parsed fixture once text and title are lifted."""
        parsed = parse_file(FIXTURES / "rsparser.opml")
        normalized = parsed.replace(
            outlines=[_strip_text_and_title(o) for o in parsed.outlines]
        )

        reparsed = parse_string(serialize(normalized))

        assert reparsed.replace(
            outlines=[_strip_text_and_title(o) for o in reparsed.outlines]
        ) == normalized

    def test_deep_nesting(self) -> None:
        """Test that deeply nested outlines are written and read back."""
        depth = 200
        outline = Outline(text=str(depth - 1), title=str(depth - 1))
        for level in reversed(range(depth - 1)):
            outline = Outline(text=str(level), title=str(level), children=[outline])
        document = Document(outlines=[outline])

        xml = serialize(document)
        parsed = parse_string(xml)

        assert parsed.max_depth == depth
        assert parsed.outline_count == depth
        assert [o.text for o in parsed.iter_outlines()] == [str(i) for i in range(depth)]
        assert xml.count("</outline>") == depth - 1
