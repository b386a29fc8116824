"""Body renderers for Folio.

Each renderer turns the body of one kind of document into HTML.

Key classes:
- MarkdownRenderer: Renders Markdown to HTML with syntax highlighting.
- HTMLRenderer: Passes HTML bodies through unchanged.
- RendererRegistry: Picks the renderer for a document.

Key functions:
- render_excerpt: Render the first paragraph of a document.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .content import Document, SourceIdentifier
from .utils import escape_html

if TYPE_CHECKING:
    from .protocols import ContentRenderer


def _generate_heading_id(text: str) -> str:
    """Generate a URL-friendly ID from heading text.

    Args:
        text: The heading text.

    Returns:
        URL-friendly slug suitable for anchor links.
    """
    slug = re.sub(r"<[^>]+>", "", text).lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-")


class _HighlightRenderer(mistune.HTMLRenderer):
    """Markdown renderer with heading anchors and Pygments highlighting."""

    def __init__(self):
        super().__init__(escape=False)
        self._heading_id_counts: dict[str, int] = {}

    def heading(self, text: str, level: int, **attrs) -> str:
        """Render a heading with a unique id attribute."""
        base_id = _generate_heading_id(text)
        if base_id in self._heading_id_counts:
            self._heading_id_counts[base_id] += 1
            heading_id = f"{base_id}-{self._heading_id_counts[base_id]}"
        else:
            self._heading_id_counts[base_id] = 0
            heading_id = base_id
        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'

    def block_code(self, code: str, info: str | None = None) -> str:
        """Render a code block, highlighted when the language is known.

        Args:
            code: The code content.
            info: Language identifier (e.g., 'python', 'sh').

        Returns:
            HTML string with highlighted code.
        """
        lang = info.split()[0] if info and info.strip() else None
        if lang:
            try:
                lexer = get_lexer_by_name(lang, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                formatter = HtmlFormatter(nowrap=False, cssclass="highlight")
                return highlight(code, lexer, formatter)
        lang_class = f' class="language-{escape_html(lang)}"' if lang else ""
        return f"<pre><code{lang_class}>{escape_html(code)}</code></pre>\n"


class MarkdownRenderer:
    """Renders Markdown bodies to HTML."""

    @property
    def source_type(self) -> str:
        return "markdown"

    def can_render(self, source: SourceIdentifier) -> bool:
        return source.suffix in (".md", ".markdown")

    def render(self, body: str) -> str:
        """Render Markdown content to HTML.

        A fresh parser is built per call so heading ids never leak between
        documents.
        """
        markdown = mistune.create_markdown(
            renderer=_HighlightRenderer(),
            plugins=["strikethrough", "footnotes", "table", "url"],
        )
        return markdown(body)


class HTMLRenderer:
    """Passes HTML bodies through unchanged."""

    @property
    def source_type(self) -> str:
        return "html"

    def can_render(self, source: SourceIdentifier) -> bool:
        return source.suffix in (".html", ".htm")

    def render(self, body: str) -> str:
        return body


class RendererRegistry:
    """Registry for body renderers.

    Renderers are tried in registration order; a document nothing claims
    is passed through as-is.
    """

    def __init__(self):
        self._renderers: list[ContentRenderer] = []
        self.register(MarkdownRenderer())
        self.register(HTMLRenderer())

    def register(self, renderer: ContentRenderer) -> None:
        """Register a new renderer.

        Args:
            renderer: A ContentRenderer implementation.
        """
        self._renderers.append(renderer)

    def get_renderer(self, source: SourceIdentifier) -> ContentRenderer | None:
        """Return the first renderer that handles the document, or None."""
        for renderer in self._renderers:
            if renderer.can_render(source):
                return renderer
        return None

    def render(self, document: Document) -> str:
        """Render the body of a document to HTML."""
        renderer = self.get_renderer(document.source)
        if renderer is None:
            return document.body
        return renderer.render(document.body)


def render_excerpt(document: Document, registry: RendererRegistry) -> str:
    """Render the first paragraph of a document.

    Headings and code blocks before it are skipped.

    Returns:
        HTML of the first paragraph, or an empty string.
    """
    for block in document.blocks:
        if block.kind == "paragraph":
            excerpt = Document(source=document.source, body=block.text)
            return registry.render(excerpt)
    return ""


# Default renderer registry instance
default_renderer_registry = RendererRegistry()
