"""Feed generation for Folio.

Generates sitemap.xml and an RSS feed from the pages of a build. Feeds are
only written when the site data defines a base ``url``.

Classes:
    FeedGenerator: Base class for feed generators.
    SitemapGenerator: Generates sitemap.xml.
    RSSGenerator: Generates rss.xml from one collection.
    FeedRegistry: Runs every registered generator.

Functions:
    create_default_feed_registry: Create a registry with default generators.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .collections import Collection
from .renderers import default_renderer_registry, render_excerpt
from .utils import escape_html

if TYPE_CHECKING:
    from .build import RenderedPage

RFC822 = "%a, %d %b %Y %H:%M:%S +0000"


class FeedGenerator(ABC):
    """Base class for feed generators."""

    @property
    @abstractmethod
    def filename(self) -> str:
        """Output filename, such as 'sitemap.xml'."""
        ...

    @abstractmethod
    def generate(self, pages: list[RenderedPage], data: dict[str, Any]) -> str | None:
        """Generate feed content.

        Args:
            pages: Pages written by the build.
            data: Site data; ``url`` is the base URL.

        Returns:
            Feed content, or None when the feed cannot be generated.
        """
        ...

    def write(
        self, output_dir: Path, pages: list[RenderedPage], data: dict[str, Any]
    ) -> bool:
        """Generate and write the feed.

        Returns:
            True if the feed was written, False if skipped.
        """
        content = self.generate(pages, data)
        if content is None:
            return False
        (output_dir / self.filename).write_text(content, encoding="utf-8")
        return True


def _base_url(data: dict[str, Any]) -> str:
    return str(data.get("url", "") or "").rstrip("/")


class SitemapGenerator(FeedGenerator):
    """Generates sitemap.xml listing every page."""

    @property
    def filename(self) -> str:
        return "sitemap.xml"

    def generate(self, pages: list[RenderedPage], data: dict[str, Any]) -> str | None:
        base_url = _base_url(data)
        if not base_url:
            return None
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
        ]
        for page in sorted(pages, key=lambda p: p.url):
            loc = escape_html(f"{base_url}{page.url}")
            if page.document.date is not None:
                lastmod = page.document.date.strftime("%Y-%m-%d")
                lines.append(f"  <url><loc>{loc}</loc><lastmod>{lastmod}</lastmod></url>")
            else:
                lines.append(f"  <url><loc>{loc}</loc></url>")
        lines.append("</urlset>")
        return "\n".join(lines)


class RSSGenerator(FeedGenerator):
    """Generates an RSS 2.0 feed of one collection, newest first.

    Documents without a layout belong to ``default_layout``, the same
    grouping the site's collections use.

    Attributes:
        collection: Layout name of the documents to syndicate.
        limit: Maximum number of items.
        default_layout: Layout of documents that name none.
    """

    def __init__(
        self, collection: str = "post", limit: int = 20, default_layout: str = "default"
    ):
        self.collection = collection
        self.limit = limit
        self.default_layout = default_layout

    @property
    def filename(self) -> str:
        return "rss.xml"

    def generate(self, pages: list[RenderedPage], data: dict[str, Any]) -> str | None:
        base_url = _base_url(data)
        if not base_url:
            return None
        urls = {id(p.document): p.url for p in pages}
        posts = Collection(
            self.collection,
            (
                p.document
                for p in pages
                if (p.document.layout or self.default_layout) == self.collection
            ),
        ).limit(self.limit)

        items = []
        for document in posts:
            link = escape_html(f"{base_url}{urls[id(document)]}")
            description = render_excerpt(document, default_renderer_registry) or document.title
            pub_date = (
                f"<pubDate>{document.date.strftime(RFC822)}</pubDate>"
                if document.date is not None
                else ""
            )
            items.append(
                f"<item><title>{escape_html(document.title)}</title><link>{link}</link>"
                f"<guid>{link}</guid>"
                f"<description>{escape_html(description)}</description>"
                f"{pub_date}</item>"
            )

        title = escape_html(str(data.get("title", "Folio Feed")))
        rss = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0"><channel>',
            f"<title>{title}</title>",
            f"<link>{escape_html(base_url)}/</link>",
            f"<description>{escape_html(str(data.get('description', '')))}</description>",
        ]
        # lastBuildDate is the newest post date
        if posts and posts[0].date is not None:
            rss.append(f"<lastBuildDate>{posts[0].date.strftime(RFC822)}</lastBuildDate>")
        rss.extend(items)
        rss.append("</channel></rss>")
        return "\n".join(rss)


class FeedRegistry:
    """Registry for feed generators."""

    def __init__(self) -> None:
        self._generators: list[FeedGenerator] = []

    def register(self, generator: FeedGenerator) -> None:
        self._generators.append(generator)

    def generate_all(
        self,
        output_dir: Path,
        pages: Iterable[RenderedPage],
        data: dict[str, Any],
    ) -> list[str]:
        """Generate all registered feeds.

        Returns:
            Filenames that were written.
        """
        pages_list = list(pages)
        generated = []
        for generator in self._generators:
            if generator.write(output_dir, pages_list, data):
                generated.append(generator.filename)
        return generated


def create_default_feed_registry(
    collection: str = "post", default_layout: str = "default"
) -> FeedRegistry:
    """Create a registry with the sitemap and RSS generators."""
    registry = FeedRegistry()
    registry.register(SitemapGenerator())
    registry.register(RSSGenerator(collection, default_layout=default_layout))
    return registry
