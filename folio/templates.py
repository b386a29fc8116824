"""Template rendering engine for Folio.

This module uses Jinja2 to render documents through their layouts.

A document names its layout in the ``layout`` header field; documents
without one use the configured default layout. Layouts are looked up as
``<name>.html.jinja``, ``<name>.jinja``, ``<name>.html`` and ``<name>``.

Templates receive:
- ``page``: derived ``url``, ``slug``, ``date`` and ``path``, overlaid with
  the document's header fields, plus ``title``.
- ``content``: the document body rendered to HTML.
- ``site``: global site data.
- ``entries``: the listing for the page (see ``TemplateEngine.entries_for``),
  with ``show_excerpts`` and ``entries_layout``.
- ``collections``: every collection, by layout name.

Key class:
- TemplateEngine: Resolves layouts and renders documents.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from jinja2 import (
    BaseLoader,
    ChainableUndefined,
    DictLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateNotFound,
    UndefinedError,
    select_autoescape,
)
from markupsafe import Markup
from pygments.formatters import HtmlFormatter

from .collections import Collection
from .content import Document, UrlDeriver
from .renderers import RendererRegistry, default_renderer_registry, render_excerpt
from .utils import join_root_url

__all__ = [
    "MISSING_FIELD_POLICIES",
    "MissingTemplateFieldError",
    "TemplateEngine",
    "UnknownLayoutError",
]

# How a reference to a header field the document lacks is handled.
MISSING_FIELD_POLICIES = {
    "empty": ChainableUndefined,
    "error": StrictUndefined,
}

DEFAULT_OPTIONS: dict[str, Any] = {
    "default_layout": "default",
    "listing_collection": "post",
    "show_excerpts": False,
    "entries_layout": "list",
    "missing_fields": "empty",
    "permalink": UrlDeriver.DEFAULT_PERMALINK,
    "root_url": "",
}


class UnknownLayoutError(LookupError):
    """No template exists for the layout a document asks for.

    Attributes:
        layout: The requested layout name.
        source: Path of the document.
    """

    def __init__(self, layout: str, source: str):
        self.layout = layout
        self.source = source
        super().__init__(f"{source}: unknown layout '{layout}'")


class MissingTemplateFieldError(LookupError):
    """A template used a field the document does not define.

    Only raised under the ``error`` missing-field policy.

    Attributes:
        source: Path of the document.
        detail: Jinja2's description of the missing value.
    """

    def __init__(self, source: str, detail: str):
        self.source = source
        self.detail = detail
        super().__init__(f"{source}: missing template field ({detail})")


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Rendering is a pure function of the document, the templates and the
    collections: nothing time- or environment-dependent reaches a template,
    so rendering the same input twice gives identical output.

    Attributes:
        data: Global site data, exposed as ``site``.
        options: Rendering options (see DEFAULT_OPTIONS).
        env: Jinja2 environment.
        renderer_registry: Body renderers.
        url_deriver: Derives document URLs.
    """

    def __init__(
        self,
        site_dir: Path | None,
        data: dict[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
        loader: BaseLoader | None = None,
        renderer_registry: RendererRegistry | None = None,
    ):
        """Initialize the template engine.

        Args:
            site_dir: Site directory holding ``_layouts`` and ``_partials``.
            data: Global site data.
            options: Rendering options overriding DEFAULT_OPTIONS.
            loader: Template loader to use instead of the site directory.
            renderer_registry: Optional custom body renderers.
        """
        self.data = data or {}
        self.options = {**DEFAULT_OPTIONS, **(options or {})}
        policy = self.options["missing_fields"]
        if policy not in MISSING_FIELD_POLICIES:
            raise ValueError(
                f"missing_fields must be one of {sorted(MISSING_FIELD_POLICIES)}, "
                f"got {policy!r}"
            )
        if loader is None:
            if site_dir is None:
                raise ValueError("either site_dir or loader is required")
            loader = FileSystemLoader([site_dir / "_layouts", site_dir / "_partials"])
        self.env = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml", "jinja"], default=True),
            undefined=MISSING_FIELD_POLICIES[policy],
        )
        self.renderer_registry = renderer_registry or default_renderer_registry
        self.url_deriver = UrlDeriver(self.options["permalink"])
        self._excerpts: dict[tuple[str, str], Markup] = {}
        self._views: tuple[Mapping[str, Collection], dict[str, Any]] | None = None
        self._install_globals()

    @classmethod
    def from_mapping(
        cls,
        templates: Mapping[str, str],
        data: dict[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> TemplateEngine:
        """Build an engine over in-memory templates keyed by layout name."""
        return cls(None, data, options, loader=DictLoader(dict(templates)))

    def _install_globals(self) -> None:
        """Install global variables and functions in the Jinja environment."""
        self.env.globals["site"] = self.data
        self.env.globals["url_for"] = self._url_for
        self.env.globals["pygments_css"] = self._pygments_css

    @staticmethod
    def _pygments_css() -> str:
        """Return Pygments CSS styles for the .highlight class."""
        return HtmlFormatter().get_style_defs(".highlight")

    def _url_for(self, path: str) -> str:
        """Generate a URL for a path, applying root_url if configured."""
        if path.startswith(("http://", "https://", "//")):
            return path
        return join_root_url(self.options["root_url"], path)

    def layout_name(self, document: Document) -> str:
        return document.layout or self.options["default_layout"]

    def get_layout(self, layout: str, source: str = "<string>") -> Template:
        """Resolve and return the layout template.

        Args:
            layout: Layout name to resolve.
            source: Document path, for the error message.

        Raises:
            UnknownLayoutError: If no candidate template exists.
        """
        candidates = [
            f"{layout}.html.jinja",
            f"{layout}.jinja",
            f"{layout}.html",
            layout,
        ]
        for name in candidates:
            try:
                return self.env.get_template(name)
            except TemplateNotFound as exc:
                # A missing include inside an existing layout is not a
                # missing layout.
                if exc.name != name:
                    raise
        raise UnknownLayoutError(layout, source)

    def url_for_document(self, document: Document) -> str:
        return self.url_deriver.derive(document.source)

    def page_context(self, document: Document) -> dict[str, Any]:
        """Derived values of a document overlaid with its header fields.

        Header fields win over the derived ``url``, ``slug``, ``date`` and
        ``path``; ``title`` falls back to one made from the filename.
        """
        return {
            "url": self.url_for_document(document),
            "slug": document.source.slug,
            "date": document.date,
            "path": document.source.path,
            **document.header,
            "title": document.title,
        }

    def entries_for(
        self, document: Document, collections: Mapping[str, Collection]
    ) -> list[dict[str, Any]]:
        """Resolve the listing a page enumerates.

        The listing is the collection named by the ``collection`` header
        field (or the ``listing_collection`` option), cut to the first
        ``limit`` documents when the header sets one. Excerpts are only
        rendered when ``show_excerpts`` is on.
        """
        name = document.header.get("collection") or self.options["listing_collection"]
        collection = collections.get(name) or Collection(name, ())
        show_excerpts = self._show_excerpts(document)
        entries = []
        for entry in collection.limit(document.header.get("limit")):
            view = self.page_context(entry)
            view["excerpt"] = self._excerpt(entry) if show_excerpts else ""
            entries.append(view)
        return entries

    def _excerpt(self, entry: Document) -> Markup:
        # Listing pages share entries; each excerpt is rendered once.
        key = (entry.source.path, entry.body)
        if key not in self._excerpts:
            self._excerpts[key] = Markup(render_excerpt(entry, self.renderer_registry))
        return self._excerpts[key]

    def _collection_views(
        self, collections: Mapping[str, Collection]
    ) -> dict[str, list[dict[str, Any]]]:
        """Page contexts of every collection, built once per collections mapping."""
        if self._views is None or self._views[0] is not collections:
            views = {
                name: [self.page_context(d) for d in collection]
                for name, collection in collections.items()
            }
            self._views = (collections, views)
        return self._views[1]

    def _show_excerpts(self, document: Document) -> bool:
        value = document.header.get("show_excerpts")
        return self.options["show_excerpts"] if value is None else value

    def context_for(
        self, document: Document, collections: Mapping[str, Collection]
    ) -> dict[str, Any]:
        """Build the template context for a document."""
        return {
            "page": self.page_context(document),
            "content": Markup(self.renderer_registry.render(document)),
            "site": self.data,
            "entries": self.entries_for(document, collections),
            "show_excerpts": self._show_excerpts(document),
            "entries_layout": document.header.get("entries_layout")
            or self.options["entries_layout"],
            "collections": self._collection_views(collections),
        }

    def render(
        self,
        document: Document,
        collections: Mapping[str, Collection] | None = None,
    ) -> str:
        """Render a document through its layout.

        Args:
            document: Document to render.
            collections: Collections for listing pages, by layout name.

        Returns:
            Rendered HTML string.

        Raises:
            UnknownLayoutError: If the layout does not exist.
            MissingTemplateFieldError: If a template uses an absent field
                under the ``error`` policy.
        """
        template = self.get_layout(self.layout_name(document), document.source.path)
        context = self.context_for(document, collections or {})
        try:
            return template.render(**context)
        except UndefinedError as exc:
            if self.options["missing_fields"] == "error":
                raise MissingTemplateFieldError(
                    document.source.path, exc.message or str(exc)
                ) from exc
            raise
