"""Frontmatter parsing for Folio.

A document starts with an optional header block: a ``---`` line, YAML
``key: value`` pairs, and a closing ``---`` line. Everything after the
closing line is the body.

Key functions:
- parse_document: Turn raw text into a Document.
- serialize_document: Turn a Document back into raw text.
- validate_header: Check recognized header keys hold the right types.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping
from typing import Any

import yaml

from .content import HEADER_FIELDS, Document, SourceIdentifier, iter_blocks

__all__ = [
    "SENTINEL",
    "MalformedHeaderError",
    "iter_blocks",
    "parse_document",
    "parse_header",
    "serialize_document",
    "validate_header",
]

SENTINEL = "---"


class MalformedHeaderError(ValueError):
    """A header block that is unterminated or cannot be decoded.

    Attributes:
        source: Path of the offending document.
        reason: What is wrong with the header.
    """

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class _DuplicateKeyError(yaml.constructor.ConstructorError):
    def __init__(self, key, node, key_node):
        self.key = key
        super().__init__(
            "while constructing a mapping",
            node.start_mark,
            f"found duplicate key {key!r}",
            key_node.start_mark,
        )


class _UniqueKeyLoader(yaml.SafeLoader):
    """Safe YAML loader that rejects a key repeated within one mapping."""

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _ in node.value:
            if key_node.tag == "tag:yaml.org,2002:merge":
                continue
            key = self.construct_object(key_node, deep=deep)
            if not isinstance(key, Hashable):
                continue
            if key in seen:
                raise _DuplicateKeyError(key, node, key_node)
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _is_sentinel(line: str) -> bool:
    return line.rstrip() == SENTINEL


def split_header(text: str, source: str = "<string>") -> tuple[str | None, str]:
    """Split raw text into header text and body.

    Args:
        text: Raw document text.
        source: Path used in error messages.

    Returns:
        Tuple of (header text or None when there is no header, body).

    Raises:
        MalformedHeaderError: If the header is opened but never closed.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    lines = text.splitlines(keepends=True)
    if not lines or not _is_sentinel(lines[0]):
        return None, text
    for index in range(1, len(lines)):
        if _is_sentinel(lines[index]):
            header = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return header, body
    raise MalformedHeaderError(source, "header block is never closed")


def validate_header(header: Mapping[Any, Any], source: str = "<string>") -> None:
    """Check header keys are strings and recognized keys have the right type.

    Raises:
        MalformedHeaderError: On a non-string key or a mistyped field.
    """
    for key, value in header.items():
        if not isinstance(key, str):
            raise MalformedHeaderError(source, f"header key {key!r} is not a string")
        expected = HEADER_FIELDS.get(key)
        if expected is None or value is None:
            continue
        # bool is an int subclass; a limit of `true` is still a mistake
        if expected is int and isinstance(value, bool):
            raise MalformedHeaderError(source, f"'{key}' must be an integer")
        if not isinstance(value, expected):
            raise MalformedHeaderError(
                source, f"'{key}' must be {_describe(expected)}, got {value!r}"
            )
        if key == "limit" and value < 0:
            raise MalformedHeaderError(source, "'limit' must not be negative")


def _describe(expected: type) -> str:
    names = {str: "a string", int: "an integer", bool: "a boolean"}
    return names.get(expected, expected.__name__)


def parse_header(header_text: str, source: str = "<string>") -> dict[str, Any]:
    """Decode header text into an ordered mapping.

    Raises:
        MalformedHeaderError: If the YAML is invalid, repeats a key or is
            not a mapping.
    """
    try:
        data = yaml.load(header_text, Loader=_UniqueKeyLoader)
    except _DuplicateKeyError as exc:
        raise MalformedHeaderError(source, f"duplicate key {exc.key!r}") from exc
    except yaml.YAMLError as exc:
        raise MalformedHeaderError(source, f"invalid YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedHeaderError(
            source, f"header must be key/value pairs, got {type(data).__name__}"
        )
    validate_header(data, source)
    return data


def parse_document(
    text: str, source: SourceIdentifier | str = "<string>"
) -> Document:
    """Parse raw text into a Document.

    A document without a header block gets an empty header, so the default
    layout applies to it.

    Args:
        text: Raw document text.
        source: Identifier (or relative path) of the document.

    Returns:
        Parsed Document.

    Raises:
        MalformedHeaderError: If the header is unterminated or undecodable.
    """
    if not isinstance(source, SourceIdentifier):
        source = SourceIdentifier.from_path(source)
    header_text, body = split_header(text, source.path)
    header = {} if header_text is None else parse_header(header_text, source.path)
    return Document(source=source, header=header, body=body)


def serialize_document(document: Document) -> str:
    """Render a Document back to text with a header block.

    The header keeps its key order, so parsing the result yields an equal
    Document.
    """
    header = dict(document.header)
    dumped = (
        yaml.safe_dump(
            header, sort_keys=False, allow_unicode=True, default_flow_style=False
        )
        if header
        else ""
    )
    return f"{SENTINEL}\n{dumped}{SENTINEL}\n{document.body}"
