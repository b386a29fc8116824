"""Document store for Folio.

The store is the site directory on disk. It is read once per build; every
file becomes one immutable Document.

Key classes:
- FileDocumentStore: Discovers document files and parses them.
- LoadResult: Documents that parsed, and the files that did not.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .content import Document, SourceIdentifier
from .frontmatter import MalformedHeaderError, parse_document
from .utils import is_document


@dataclass
class LoadResult:
    """Outcome of reading the store.

    Attributes:
        documents: Parsed documents in store enumeration order.
        failures: (path, error) pairs for files that could not be parsed.
    """

    documents: list[Document] = field(default_factory=list)
    failures: list[tuple[Path, Exception]] = field(default_factory=list)


class FileDocumentStore:
    """Loads documents from a site directory.

    Files and folders whose name starts with ``_`` are skipped, except for
    draft files (``_name.md``) when drafts are requested. Enumeration order
    is sorted by relative path so builds are reproducible.

    Attributes:
        site_dir: Directory containing site content.
    """

    def __init__(self, site_dir: Path):
        self.site_dir = site_dir

    def iter_files(self, include_drafts: bool = False) -> list[Path]:
        """List all document files.

        Args:
            include_drafts: Whether to include ``_``-prefixed draft files.

        Returns:
            List of paths to document files.
        """
        files: list[Path] = []
        for path in sorted(self.site_dir.rglob("*")):
            if path.is_dir():
                continue
            rel = path.relative_to(self.site_dir)
            # _layouts, _partials and other internal folders
            if any(part.startswith("_") for part in rel.parts[:-1]):
                continue
            if rel.name.startswith("_") and not include_drafts:
                continue
            if is_document(path):
                files.append(path)
        return files

    def iter_static_files(self) -> list[Path]:
        """List files that are copied to the output unchanged.

        These are the non-document files outside internal folders.
        """
        files: list[Path] = []
        for path in sorted(self.site_dir.rglob("*")):
            if path.is_dir() or is_document(path):
                continue
            rel = path.relative_to(self.site_dir)
            if any(part.startswith(("_", ".")) for part in rel.parts):
                continue
            files.append(path)
        return files

    def read(self, path: Path) -> Document:
        """Read and parse a single document.

        Raises:
            MalformedHeaderError: If the header cannot be parsed.
            UnicodeDecodeError: If the file is not UTF-8.
        """
        rel = path.relative_to(self.site_dir)
        source = SourceIdentifier.from_path(rel.as_posix())
        text = path.read_text(encoding="utf-8")
        return parse_document(text, source)

    def load(self, include_drafts: bool = False) -> LoadResult:
        """Parse every document, collecting per-file failures.

        A bad file does not stop the others from loading.

        Args:
            include_drafts: Whether to include draft files.

        Returns:
            LoadResult with the documents and failures.
        """
        result = LoadResult()
        for path in self.iter_files(include_drafts):
            try:
                result.documents.append(self.read(path))
            except (MalformedHeaderError, UnicodeDecodeError) as exc:
                result.failures.append((path, exc))
        return result
