from datetime import date
from pathlib import Path

from folio.utils import (
    ensure_clean_dir,
    escape_html,
    is_document,
    is_html,
    is_markdown,
    join_root_url,
    slugify,
    split_dated_name,
    titleize,
)


def test_split_dated_name():
    assert split_dated_name("2019-04-08-hello-world") == (date(2019, 4, 8), "hello-world")
    assert split_dated_name("about") == (None, "about")
    assert split_dated_name("2019-02-30-bad-date") == (None, "2019-02-30-bad-date")
    assert split_dated_name("01-02-03-numbers") == (None, "01-02-03-numbers")


def test_slugify():
    assert slugify("2019-04-08-Hello World!") == "hello-world"
    assert slugify("about_me") == "about-me"
    assert slugify("___") == "index"


def test_titleize():
    assert titleize("2019-04-08-hello-world.md") == "Hello World"
    assert titleize("getting_started.md") == "Getting Started"
    assert titleize("---.md") == "Untitled"


def test_file_type_checks():
    assert is_markdown(Path("a.md"))
    assert is_markdown(Path("a.MARKDOWN"))
    assert is_html(Path("a.html"))
    assert not is_html(Path("a.html.jinja"))
    assert is_document(Path("a.htm"))
    assert not is_document(Path("a.png"))


def test_join_root_url():
    assert join_root_url("https://example.com/", "/about/") == "https://example.com/about/"
    assert join_root_url("https://example.com", "about/") == "https://example.com/about/"
    assert join_root_url("", "about/") == "/about/"


def test_escape_html():
    assert escape_html('<a href="x">Tom & Jerry</a>') == (
        "&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&lt;/a&gt;"
    )


def test_ensure_clean_dir(tmp_path):
    target = tmp_path / "out"
    (target / "nested").mkdir(parents=True)
    (target / "nested" / "old.html").write_text("old", encoding="utf-8")
    ensure_clean_dir(target)
    assert target.exists()
    assert list(target.iterdir()) == []

    fresh = tmp_path / "fresh"
    ensure_clean_dir(fresh)
    assert fresh.is_dir()
