"""Protocol definitions for Folio.

The pipeline stages talk to each other through these interfaces, so a
stage can be swapped (an in-memory store in tests, another body format)
without touching the others.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .collections import Collection
    from .content import Document, SourceIdentifier
    from .store import LoadResult


@runtime_checkable
class ContentRenderer(Protocol):
    """Protocol for rendering document bodies to HTML.

    Each implementation handles one body format (Markdown, HTML).
    """

    @abstractmethod
    def can_render(self, source: SourceIdentifier) -> bool:
        """Check if this renderer handles the given document."""
        ...

    @abstractmethod
    def render(self, body: str) -> str:
        """Render body text to HTML."""
        ...

    @property
    @abstractmethod
    def source_type(self) -> str:
        """Return the source type identifier (e.g., 'markdown', 'html')."""
        ...


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol for the source of documents."""

    @abstractmethod
    def iter_files(self, include_drafts: bool = False) -> list[Path]:
        """List document files in enumeration order."""
        ...

    @abstractmethod
    def load(self, include_drafts: bool = False) -> LoadResult:
        """Parse every document, collecting per-file failures."""
        ...


@runtime_checkable
class DocumentRenderer(Protocol):
    """Protocol for rendering documents through their layouts."""

    @abstractmethod
    def render(
        self,
        document: Document,
        collections: Mapping[str, Collection] | None = None,
    ) -> str:
        """Render a document to its final output text."""
        ...
