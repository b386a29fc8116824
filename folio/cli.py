"""Command-line interface for Folio.

This module defines the CLI commands using the Click framework.

Commands:
- build: Build the site into the output directory.
- check: Parse and render everything, reporting problems without writing.
"""

from __future__ import annotations

from pathlib import Path

import click
import yaml

from . import __version__


@click.group()
@click.version_option(version=__version__, prog_name="folio")
def cli():
    """Folio static site generator."""


def _relative(path: Path, root: Path) -> Path:
    try:
        return path.relative_to(root)
    except ValueError:
        return path


def _report_errors(result, project_root: Path) -> None:
    """Print every per-document failure of a build or check."""
    count = len(result.errors)
    noun = "document" if count == 1 else "documents"
    click.echo(
        click.style(f"{count} {noun} failed:", fg="red", bold=True), err=True
    )
    for error in result.errors:
        rel_path = _relative(error.source_path, project_root)
        click.echo(click.style(f"  File: {rel_path}", fg="yellow"), err=True)
        click.echo(click.style(f"  Error: {error.message}", fg="white"), err=True)


def _run(action):
    """Run a build step, turning configuration problems into CLI errors."""
    try:
        return action()
    except (FileNotFoundError, ValueError, yaml.YAMLError) as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft and unpublished content")
@click.option("--root-url", default=None, help="Base URL (overrides folio.yaml)")
@click.option(
    "--output",
    "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output directory (overrides folio.yaml)",
)
def build(drafts: bool, root_url: str | None, output_dir: Path | None):
    """Build the site into the output directory."""
    project_root = Path.cwd()
    from .build import build_site

    result = _run(
        lambda: build_site(
            project_root,
            include_drafts=drafts,
            root_url=root_url,
            output_dir_override=output_dir,
        )
    )
    click.echo(f"Built {len(result.pages)} pages into {result.output_dir}")
    if result.errors:
        _report_errors(result, project_root)
        raise SystemExit(1)


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft and unpublished content")
def check(drafts: bool):
    """Parse and render every document without writing output."""
    project_root = Path.cwd()
    from .build import check_site

    result = _run(lambda: check_site(project_root, include_drafts=drafts))
    if result.errors:
        _report_errors(result, project_root)
        raise SystemExit(1)
    click.echo(click.style(f"{len(result.pages)} pages OK", fg="green"))


def main():
    """Entry point for the CLI application."""
    cli()
