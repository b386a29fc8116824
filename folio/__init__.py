"""Folio static site generator.

This package builds a static blog from Markdown and HTML documents carrying
YAML frontmatter, rendered through Jinja2 layouts.

The pipeline runs leaves first:
- store: discovers document files in the site directory.
- frontmatter: splits each file into a header mapping and a body.
- collections: orders dated documents into per-layout collections.
- templates: renders each document through its layout.
- build: writes pages, static files and feeds to the output directory.

The main entry point is the CLI module.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
