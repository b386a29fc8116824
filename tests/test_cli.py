from click.testing import CliRunner

from folio import __version__
from folio.cli import cli

from .test_build import add_broken_documents, create_project


def test_cli_build(monkeypatch, tmp_path):
    project = create_project(tmp_path)
    monkeypatch.chdir(project)
    result = CliRunner().invoke(cli, ["build"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "Built 5 pages" in result.output
    assert (project / "public" / "index.html").exists()


def test_cli_build_reports_every_failure(monkeypatch, tmp_path):
    project = create_project(tmp_path)
    add_broken_documents(project)
    monkeypatch.chdir(project)
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 1
    assert "2 documents failed" in result.output
    assert "File: site/broken.md" in result.output
    assert "File: site/odd.md" in result.output
    assert "Unknown layout 'nonexistent'" in result.output
    # Good pages are still written.
    assert (project / "public" / "index.html").exists()


def test_cli_build_options(monkeypatch, tmp_path):
    project = create_project(tmp_path)
    monkeypatch.chdir(project)
    result = CliRunner().invoke(
        cli, ["build", "--drafts", "--output", "dist", "--root-url", "https://x.org"]
    )
    assert result.exit_code == 0
    assert "Built 6 pages" in result.output
    assert (project / "dist" / "index.html").exists()


def test_cli_check(monkeypatch, tmp_path):
    project = create_project(tmp_path)
    monkeypatch.chdir(project)
    result = CliRunner().invoke(cli, ["check"])
    assert result.exit_code == 0
    assert "5 pages OK" in result.output
    assert not (project / "public").exists()

    add_broken_documents(project)
    result = CliRunner().invoke(cli, ["check"])
    assert result.exit_code == 1
    assert "Malformed header: header block is never closed" in result.output


def test_cli_missing_site_dir(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 1
    assert "Expected site directory" in result.output


def test_cli_invalid_config(monkeypatch, tmp_path):
    project = create_project(tmp_path)
    (project / "folio.yaml").write_text("missing_fields: sometimes\n", encoding="utf-8")
    monkeypatch.chdir(project)
    result = CliRunner().invoke(cli, ["check"])
    assert result.exit_code == 1
    assert "missing_fields must be one of" in result.output


def test_cli_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_module_main_entrypoint():
    from folio.__main__ import main

    assert callable(main)


def test_main_invokes_cli(monkeypatch):
    import folio.cli as cli_mod

    called = {}
    monkeypatch.setattr(cli_mod, "cli", lambda: called.setdefault("ran", True))
    cli_mod.main()
    assert called["ran"]
