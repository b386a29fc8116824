"""Document model for Folio.

This module holds the immutable values the rest of the pipeline works on.

Key classes:
- SourceIdentifier: Where a document came from (path, date, slug).
- Block: One block-level chunk of a document body.
- Document: A parsed document (header mapping, body text, source).
- UrlDeriver: Derives the output URL of a document from its source.

Key functions:
- iter_blocks: Lazily split a body into blocks.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date
from pathlib import PurePosixPath
from types import MappingProxyType
from typing import Any

from .utils import slugify, split_dated_name, titleize

# Header keys with a meaning to Folio, and the types they must hold.
HEADER_FIELDS: dict[str, type] = {
    "layout": str,
    "title": str,
    "limit": int,
    "show_excerpts": bool,
    "entries_layout": str,
    "published": bool,
    "collection": str,
}

FENCE_RE = re.compile(r"^(`{3,}|~{3,})")
LIST_ITEM_RE = re.compile(r"^(?:[-*+]|\d+[.)])\s")


@dataclass(frozen=True)
class SourceIdentifier:
    """Identifies the file a document was read from.

    Attributes:
        path: POSIX path relative to the site directory.
        date: Date from a ``YYYY-MM-DD-`` filename prefix, if any.
        slug: URL-friendly name derived from the filename.
    """

    path: str
    date: date | None
    slug: str

    @classmethod
    def from_path(cls, path: str | PurePosixPath) -> SourceIdentifier:
        """Build an identifier from a path relative to the site directory."""
        rel = PurePosixPath(path)
        found, _ = split_dated_name(rel.stem)
        return cls(path=rel.as_posix(), date=found, slug=slugify(rel.stem))

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def folder(self) -> str:
        parent = PurePosixPath(self.path).parent.as_posix()
        return "" if parent == "." else parent

    @property
    def suffix(self) -> str:
        return PurePosixPath(self.path).suffix.lower()


@dataclass(frozen=True)
class Block:
    """A block-level chunk of body text.

    Attributes:
        kind: One of "heading", "code", "blockquote", "list" or "paragraph".
        text: The raw text of the block, without the trailing blank line.
    """

    kind: str
    text: str


def _classify(text: str) -> str:
    first = text.lstrip()
    if first.startswith("#"):
        return "heading"
    if first.startswith(">"):
        return "blockquote"
    if LIST_ITEM_RE.match(first):
        return "list"
    return "paragraph"


def iter_blocks(body: str) -> Iterator[Block]:
    """Lazily split a document body into blocks.

    Blocks are separated by blank lines. A fenced code block (``` or ~~~)
    is one block even when it contains blank lines; an unclosed fence runs
    to the end of the body. No further structure is validated.

    Args:
        body: Raw body text.

    Yields:
        Block objects in document order.
    """
    pending: list[str] = []
    fence: str | None = None
    for line in body.splitlines():
        if fence is not None:
            pending.append(line)
            if line.strip().startswith(fence):
                yield Block("code", "\n".join(pending))
                pending = []
                fence = None
            continue
        match = FENCE_RE.match(line.strip())
        if match:
            if pending:
                yield Block(_classify(pending[0]), "\n".join(pending))
                pending = []
            fence = match.group(1)
            pending.append(line)
            continue
        if not line.strip():
            if pending:
                yield Block(_classify(pending[0]), "\n".join(pending))
                pending = []
            continue
        pending.append(line)
    if pending:
        kind = "code" if fence is not None else _classify(pending[0])
        yield Block(kind, "\n".join(pending))


@dataclass(frozen=True)
class Document:
    """A parsed document.

    Documents never change after parsing: the header is stored as a
    read-only mapping that keeps the key order of the source.

    Attributes:
        source: Where the document was read from.
        header: Frontmatter fields, in source order.
        body: Text after the header.
    """

    source: SourceIdentifier
    header: Mapping[str, Any] = field(default_factory=dict)
    body: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "header", MappingProxyType(dict(self.header)))

    @property
    def blocks(self) -> Iterator[Block]:
        return iter_blocks(self.body)

    @property
    def layout(self) -> str | None:
        return self.header.get("layout")

    @property
    def title(self) -> str:
        return self.header.get("title") or titleize(self.source.name)

    @property
    def date(self) -> date | None:
        return self.source.date

    @property
    def published(self) -> bool:
        return self.header.get("published", True) is not False

    @property
    def draft(self) -> bool:
        """Unpublished documents and files named with a leading underscore."""
        return not self.published or self.source.name.startswith("_")


class UrlDeriver:
    """Derives URLs for documents.

    Dated documents follow the permalink pattern, which may use the
    ``{year}``, ``{month}``, ``{day}``, ``{slug}`` and ``{folder}``
    placeholders. Undated documents live under their folder, and ``index``
    files map to the folder itself.

    Attributes:
        permalink: Pattern for dated documents.
    """

    DEFAULT_PERMALINK = "/{year}/{month}/{day}/{slug}/"

    def __init__(self, permalink: str | None = None):
        self.permalink = permalink or self.DEFAULT_PERMALINK

    def derive(self, source: SourceIdentifier) -> str:
        """Derive the URL for a document.

        Args:
            source: Identifier of the document.

        Returns:
            URL path beginning and ending with a slash.
        """
        if source.date is not None:
            path = self.permalink.format(
                year=f"{source.date.year:04d}",
                month=f"{source.date.month:02d}",
                day=f"{source.date.day:02d}",
                slug=source.slug,
                folder=source.folder,
            )
            parts = [p for p in path.split("/") if p]
        else:
            parts = [p for p in source.folder.split("/") if p]
            if source.slug != "index":
                parts.append(source.slug)
        return f"/{'/'.join(parts)}/" if parts else "/"
