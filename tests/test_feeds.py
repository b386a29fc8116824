from folio.build import RenderedPage
from folio.content import Document, SourceIdentifier
from folio.feeds import (
    FeedRegistry,
    RSSGenerator,
    SitemapGenerator,
    create_default_feed_registry,
)

DATA = {"url": "https://example.org/", "title": "Tools & Notes"}


def page(path: str, url: str, body: str = "", **header) -> RenderedPage:
    document = Document(SourceIdentifier.from_path(path), header, body)
    return RenderedPage(document=document, url=url, html="")


def sample_pages() -> list[RenderedPage]:
    return [
        page("index.md", "/", layout="home"),
        page("about.md", "/about/"),
        page(
            "posts/2019-03-01-old.md",
            "/2019/03/01/old/",
            "Old <b>news</b>.",
            layout="post",
            title="Old",
        ),
        page("posts/2019-04-08-new.md", "/2019/04/08/new/", "Fresh.", layout="post"),
    ]


def test_feeds_need_a_base_url():
    assert SitemapGenerator().generate(sample_pages(), {}) is None
    assert RSSGenerator().generate(sample_pages(), {}) is None


def test_sitemap_lists_every_page():
    sitemap = SitemapGenerator().generate(sample_pages(), DATA)
    assert "<url><loc>https://example.org/</loc></url>" in sitemap
    assert "<loc>https://example.org/about/</loc>" in sitemap
    assert (
        "<loc>https://example.org/2019/04/08/new/</loc><lastmod>2019-04-08</lastmod>"
        in sitemap
    )


def test_rss_lists_posts_newest_first():
    rss = RSSGenerator("post").generate(sample_pages(), DATA)
    assert "<title>Tools &amp; Notes</title>" in rss
    assert rss.index("2019/04/08/new") < rss.index("2019/03/01/old")
    assert "/about/" not in rss
    assert "<lastBuildDate>Mon, 08 Apr 2019 00:00:00 +0000</lastBuildDate>" in rss
    assert "&lt;p&gt;Old &lt;b&gt;news&lt;/b&gt;.&lt;/p&gt;" in rss


def test_rss_limit():
    rss = RSSGenerator("post", limit=1).generate(sample_pages(), DATA)
    assert "2019/04/08/new" in rss
    assert "2019/03/01/old" not in rss


def test_rss_is_stable_across_runs():
    generator = RSSGenerator()
    assert generator.generate(sample_pages(), DATA) == generator.generate(
        sample_pages(), DATA
    )


def test_registry_writes_feeds(tmp_path):
    written = create_default_feed_registry().generate_all(tmp_path, sample_pages(), DATA)
    assert written == ["sitemap.xml", "rss.xml"]
    assert (tmp_path / "sitemap.xml").exists()
    assert (tmp_path / "rss.xml").exists()

    empty = FeedRegistry()
    assert empty.generate_all(tmp_path, sample_pages(), DATA) == []
    assert create_default_feed_registry().generate_all(tmp_path, [], {}) == []


def test_rss_counts_layoutless_documents_under_the_default_layout():
    assert "/about/" not in RSSGenerator("post").generate(sample_pages(), DATA)

    rss = RSSGenerator("post", default_layout="post").generate(sample_pages(), DATA)
    assert "<link>https://example.org/about/</link>" in rss
    assert "<link>https://example.org/</link><guid>" not in rss
