"""Utility functions for Folio.

String, path and URL helpers shared by the content model, the build and the
feeds.

Key functions:
    split_dated_name: Split a ``YYYY-MM-DD-slug`` filename stem.
    slugify: Convert filename stems to URL slugs.
    titleize: Convert filenames to human-readable titles.
    is_markdown / is_html / is_document: File type checks.
    ensure_clean_dir: Ensure a directory exists and is empty.
    join_root_url: Join a base URL with a path.
    escape_html: Escape text for HTML and XML output.
"""

from __future__ import annotations

import re
import shutil
from datetime import date
from pathlib import Path


def split_dated_name(name: str) -> tuple[date | None, str]:
    """Split a filename stem into its date prefix and the remainder.

    Args:
        name: Filename stem (without extension).

    Returns:
        Tuple of (date or None, remaining name). When the stem has no valid
        ``YYYY-MM-DD-`` prefix the date is None and the name is unchanged.

    Examples:
        >>> split_dated_name("2019-04-08-hello-world")
        (datetime.date(2019, 4, 8), 'hello-world')

        >>> split_dated_name("about")
        (None, 'about')
    """
    parts = name.split("-")
    if len(parts) >= 4 and all(p.isdigit() for p in parts[:3]) and len(parts[0]) == 4:
        try:
            found = date(int(parts[0]), int(parts[1]), int(parts[2]))
        except ValueError:
            return None, name
        return found, "-".join(parts[3:])
    return None, name


def slugify(name: str) -> str:
    """Convert filename (without extension) to slug, dropping date prefix.

    Args:
        name: Filename stem.

    Returns:
        URL-friendly slug.
    """
    _, cleaned = split_dated_name(name)
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", cleaned)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "index"


def titleize(filename: str) -> str:
    """Convert a filename to a human-readable title.

    Removes date prefixes (YYYY-MM-DD), replaces hyphens and underscores
    with spaces, and capitalizes each word.

    Examples:
        >>> titleize("2019-04-08-hello-world.md")
        'Hello World'
    """
    _, base = split_dated_name(Path(filename).stem)
    words = re.split(r"[\s\-_]+", base)
    return " ".join(word.capitalize() for word in words if word) or "Untitled"


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown file."""
    return path.suffix.lower() in (".md", ".markdown")


def is_html(path: Path) -> bool:
    """Check if a path is a plain HTML file."""
    return path.suffix.lower() in (".html", ".htm")


def is_document(path: Path) -> bool:
    """Check if a path holds a renderable document."""
    return is_markdown(path) or is_html(path)


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)


def join_root_url(root_url: str, path: str) -> str:
    """Safely join a root URL and a path, avoiding double slashes.

    Examples:
        >>> join_root_url("https://example.com/", "about/")
        'https://example.com/about/'
    """
    suffix = path if path.startswith("/") else f"/{path}"
    if not root_url:
        return suffix
    return f"{root_url.rstrip('/')}{suffix}"


def escape_html(text: str) -> str:
    """Escape ``&``, ``<``, ``>`` and ``"`` for HTML and XML output."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )
