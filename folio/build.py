"""Site building functionality for Folio.

This module loads configuration and data, reads the document store,
assembles collections, renders every document and writes the output.

A problem with one document never stops the build: it is recorded as a
BuildError on the result and the remaining documents are still rendered,
so every problem shows up in a single run.

Key functions:
- build_site: Build the entire site into the output directory.
- check_site: Render everything without writing, to report problems.
- load_config: Loads site configuration from folio.yaml.
- load_data: Loads site data from YAML files in the data directory.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from jinja2 import TemplateSyntaxError, UndefinedError

from .collections import Collection, assemble_collections
from .content import Document
from .feeds import create_default_feed_registry
from .frontmatter import MalformedHeaderError
from .protocols import DocumentStore
from .store import FileDocumentStore
from .templates import (
    DEFAULT_OPTIONS,
    MissingTemplateFieldError,
    TemplateEngine,
    UnknownLayoutError,
)
from .utils import ensure_clean_dir

CONFIG_FILENAME = "folio.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "output_dir": "output",
    **DEFAULT_OPTIONS,
}


class BuildError(Exception):
    """Error during site build with file context.

    Attributes:
        source_path: Path to the source file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


@dataclass
class RenderedPage:
    """A document rendered to its final HTML.

    Attributes:
        document: The source document.
        url: URL path the page is served at.
        html: Rendered output.
    """

    document: Document
    url: str
    html: str


@dataclass
class BuildResult:
    """Result of a build or check.

    Attributes:
        documents: Documents that parsed (and are published, unless drafts
            were included).
        pages: Pages that rendered.
        errors: Per-document failures.
        collections: Collections by layout name.
        output_dir: Directory the site was written to, None for a check.
        data: Global site data dictionary.
    """

    documents: list[Document] = field(default_factory=list)
    pages: list[RenderedPage] = field(default_factory=list)
    errors: list[BuildError] = field(default_factory=list)
    collections: dict[str, Collection] = field(default_factory=dict)
    output_dir: Path | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def load_config(project_root: Path) -> dict[str, Any]:
    """Load site configuration from folio.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ValueError: If folio.yaml is not a mapping.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{config_path} must contain key/value pairs")
        config.update(loaded)
    return config


def load_data(project_root: Path) -> dict[str, Any]:
    """Load site data from YAML files in the data directory.

    ``site.yaml`` is merged into the top level; every other file is
    available under its stem.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing merged data from all YAML files.
    """
    data_dir = project_root / "data"
    data: dict[str, Any] = {}
    if not data_dir.exists():
        return data
    for path in sorted(data_dir.glob("*.yaml")):
        with open(path, encoding="utf-8") as f:
            payload = yaml.safe_load(f)
        if path.name == "site.yaml":
            if isinstance(payload, dict):
                data.update(payload)
        elif payload is not None:
            data[path.stem] = payload
    return data


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    if isinstance(exc, MalformedHeaderError):
        return f"Malformed header: {exc.reason}"
    if isinstance(exc, UnknownLayoutError):
        return f"Unknown layout '{exc.layout}'"
    if isinstance(exc, MissingTemplateFieldError):
        return f"Missing template field: {exc.detail}"
    if isinstance(exc, TemplateSyntaxError):
        where = f" in {exc.name}" if exc.name else ""
        return f"Template syntax error{where} on line {exc.lineno}: {exc.message}"
    if isinstance(exc, UnicodeDecodeError):
        return "File is not valid UTF-8"
    if isinstance(exc, UndefinedError):
        return f"Undefined variable: {exc}"
    return f"{type(exc).__name__}: {exc}"


def render_site(
    project_root: Path,
    include_drafts: bool = False,
    root_url: str | None = None,
    config: dict[str, Any] | None = None,
    store: DocumentStore | None = None,
) -> BuildResult:
    """Parse and render every document without writing anything.

    Args:
        project_root: Root directory of the project.
        include_drafts: Whether to include drafts and unpublished documents.
        root_url: Optional base URL overriding the configured one.
        config: Already loaded configuration; read from folio.yaml if None.
        store: Document source; the project's site directory if None.

    Returns:
        BuildResult with rendered pages and per-document errors.

    Raises:
        FileNotFoundError: If the project has no site directory.
        ValueError: If the configuration is invalid.
    """
    if config is None:
        config = load_config(project_root)
    if root_url is not None:
        config["root_url"] = root_url
    data = load_data(project_root)
    site_dir = project_root / "site"
    if not site_dir.exists():
        raise FileNotFoundError(f"Expected site directory at {site_dir}")

    engine = TemplateEngine(site_dir, data, config)
    result = BuildResult(data=data)

    store = store or FileDocumentStore(site_dir)
    loaded = store.load(include_drafts=include_drafts)
    for path, exc in loaded.failures:
        result.errors.append(BuildError(path, _format_error_message(exc), exc))
    result.documents = [
        d for d in loaded.documents if include_drafts or d.published
    ]
    result.collections = assemble_collections(
        result.documents, config["default_layout"]
    )

    claimed: dict[str, Document] = {}
    for document in result.documents:
        source_path = site_dir / document.source.path
        url = engine.url_for_document(document)
        if url in claimed:
            result.errors.append(
                BuildError(
                    source_path,
                    f"URL {url} is already produced by {claimed[url].source.path}",
                )
            )
            continue
        try:
            html = engine.render(document, result.collections)
        except Exception as exc:
            result.errors.append(
                BuildError(source_path, _format_error_message(exc), exc)
            )
            continue
        # A URL belongs to the first document that renders to it.
        claimed[url] = document
        result.pages.append(RenderedPage(document=document, url=url, html=html))
    return result


def check_site(project_root: Path, include_drafts: bool = False) -> BuildResult:
    """Report every problem in the site without writing output."""
    return render_site(project_root, include_drafts=include_drafts)


def build_site(
    project_root: Path,
    include_drafts: bool = False,
    root_url: str | None = None,
    clean_output: bool = True,
    output_dir_override: Path | None = None,
) -> BuildResult:
    """Build the entire static site.

    Pages that rendered are written even when other documents failed; the
    failures are listed on the result.

    Args:
        project_root: Root directory of the project.
        include_drafts: Whether to include drafts and unpublished documents.
        root_url: Optional base URL overriding the configured one.
        clean_output: Whether to wipe the output directory before building.
        output_dir_override: Optional path to write the build output instead
            of the configured output_dir.

    Returns:
        BuildResult containing pages, errors, output directory and site data.
    """
    config = load_config(project_root)
    result = render_site(
        project_root, include_drafts=include_drafts, root_url=root_url, config=config
    )

    output_dir = output_dir_override or (project_root / config["output_dir"])
    if clean_output:
        ensure_clean_dir(output_dir)
    else:
        output_dir.mkdir(parents=True, exist_ok=True)
    result.output_dir = output_dir

    for page in result.pages:
        _write_page(output_dir, page)
    _copy_static(project_root, output_dir)
    create_default_feed_registry(
        config["listing_collection"], config["default_layout"]
    ).generate_all(
        output_dir, result.pages, result.data
    )
    return result


def _write_page(output_dir: Path, page: RenderedPage) -> None:
    """Write a rendered page to ``<output_dir>/<url>/index.html``."""
    target_dir = output_dir / page.url.strip("/")
    target_dir.mkdir(parents=True, exist_ok=True)
    with open(target_dir / "index.html", "w", encoding="utf-8") as f:
        f.write(page.html)


def _copy_static(project_root: Path, output_dir: Path) -> None:
    """Copy static files verbatim.

    ``assets/`` is copied to ``<output_dir>/assets/``; files in ``site/``
    that are not documents (images, CNAME, ...) keep their relative path.
    """
    assets_dir = project_root / "assets"
    if assets_dir.exists():
        shutil.copytree(assets_dir, output_dir / "assets", dirs_exist_ok=True)
    site_dir = project_root / "site"
    for path in FileDocumentStore(site_dir).iter_static_files():
        dest = output_dir / path.relative_to(site_dir)
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, dest)
