from dataclasses import FrozenInstanceError
from datetime import date

import pytest

from folio.content import Document, SourceIdentifier
from folio.frontmatter import (
    MalformedHeaderError,
    parse_document,
    serialize_document,
    split_header,
)


def test_parse_header_and_body():
    text = (
        "---\nlayout: post\ntitle: Hello\nlimit: 3\nshow_excerpts: true\n---\n"
        "Body text\n"
    )
    doc = parse_document(text, "posts/2019-04-08-hello.md")
    assert list(doc.header) == ["layout", "title", "limit", "show_excerpts"]
    assert doc.header["limit"] == 3
    assert doc.header["show_excerpts"] is True
    assert doc.body == "Body text\n"
    assert doc.layout == "post"
    assert doc.source.date == date(2019, 4, 8)
    assert doc.source.slug == "hello"


def test_document_without_header_has_empty_header():
    text = "# Title\n\nJust text.\n"
    doc = parse_document(text, "about.md")
    assert dict(doc.header) == {}
    assert doc.body == text
    assert doc.layout is None


def test_empty_header_block():
    doc = parse_document("---\n---\nHello", "page.md")
    assert dict(doc.header) == {}
    assert doc.body == "Hello"


def test_unterminated_header_fails():
    with pytest.raises(MalformedHeaderError) as exc:
        parse_document("---\nlayout: post\ntitle: Never closed\n\nBody\n", "draft.md")
    assert exc.value.source == "draft.md"
    assert "never closed" in exc.value.reason


def test_lone_opening_sentinel_fails():
    with pytest.raises(MalformedHeaderError):
        parse_document("---", "x.md")


def test_invalid_yaml_fails():
    with pytest.raises(MalformedHeaderError) as exc:
        parse_document("---\ntitle: [unclosed\n---\nBody", "x.md")
    assert "invalid YAML" in exc.value.reason


def test_header_must_be_mapping():
    with pytest.raises(MalformedHeaderError):
        parse_document("---\n- a\n- b\n---\nBody", "x.md")


def test_header_keys_must_be_strings():
    with pytest.raises(MalformedHeaderError):
        parse_document("---\n2019: x\n---\n", "x.md")


@pytest.mark.parametrize(
    "header",
    [
        "limit: many",
        "limit: true",
        "limit: -1",
        "show_excerpts: sometimes",
        "layout: 3",
        "published: 0",
    ],
)
def test_recognized_fields_are_type_checked(header):
    with pytest.raises(MalformedHeaderError):
        parse_document(f"---\n{header}\n---\n", "x.md")


def test_unrecognized_fields_pass_through():
    doc = parse_document("---\ncomments: true\ntags: [a, b]\n---\n", "x.md")
    assert doc.header["comments"] is True
    assert doc.header["tags"] == ["a", "b"]


def test_crlf_and_bom_are_accepted():
    doc = parse_document("\ufeff---\r\ntitle: Hi\r\n---\r\nBody\r\n", "x.md")
    assert doc.header["title"] == "Hi"
    assert doc.body == "Body\r\n"


def test_split_header_keeps_later_rules_in_body():
    header, body = split_header("---\ntitle: A\n---\nabove\n\n---\n\nbelow\n")
    assert header == "title: A\n"
    assert body == "above\n\n---\n\nbelow\n"


@pytest.mark.parametrize(
    "document",
    [
        Document(
            SourceIdentifier.from_path("posts/2019-04-08-a.md"),
            {
                "layout": "post",
                "title": "A: with a colon",
                "limit": 2,
                "show_excerpts": False,
                "published": True,
                "tags": ["x", "y"],
                "note": "true",
            },
            "Hello\n\n---\n\nmore\n",
        ),
        Document(SourceIdentifier.from_path("about.md"), {}, "Just text"),
        Document(SourceIdentifier.from_path("index.md"), {"layout": "home"}, ""),
    ],
)
def test_serialize_then_parse_round_trips(document):
    text = serialize_document(document)
    parsed = parse_document(text, document.source)
    assert parsed == document
    assert list(parsed.header) == list(document.header)


def test_documents_are_immutable():
    doc = parse_document("---\ntitle: A\n---\nBody", "a.md")
    with pytest.raises(TypeError):
        doc.header["title"] = "B"
    with pytest.raises(FrozenInstanceError):
        doc.body = "changed"


def test_repeated_header_key_fails():
    with pytest.raises(MalformedHeaderError) as exc:
        parse_document("---\ntitle: First\ntitle: Second\n---\n", "x.md")
    assert exc.value.reason == "duplicate key 'title'"

    with pytest.raises(MalformedHeaderError):
        parse_document("---\nmeta:\n  a: 1\n  a: 2\n---\n", "x.md")


def test_yaml_merge_keys_still_load():
    doc = parse_document(
        "---\nbase: &base\n  a: 1\nmeta:\n  <<: *base\n  b: 2\n---\n", "x.md"
    )
    assert doc.header["meta"] == {"a": 1, "b": 2}
