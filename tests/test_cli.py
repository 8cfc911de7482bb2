"""Tests for the clause CLI."""

from __future__ import annotations

import json

import pytest
import typer
from typer.testing import CliRunner

from clause.cli import app, parse_assignment


@pytest.fixture
def runner():
    """Create CLI runner."""
    return CliRunner()


@pytest.fixture
def locales(tmp_path):
    """Strings directory with an English and a German table."""
    (tmp_path / "en").mkdir()
    (tmp_path / "en" / "Localizable.strings").write_text(
        '"Hello, @(name)!" = "Hello, @(name)!";\n"@(count) files" = "@(count) files";\n',
        encoding="utf-8",
    )
    (tmp_path / "de").mkdir()
    (tmp_path / "de" / "Localizable.strings").write_text(
        '"Hello, @(name)!" = "Hallo, @(name)!";\n"@(count) files" = "@(count) Dateien";\n',
        encoding="utf-8",
    )
    return tmp_path


class TestParseAssignment:
    """Test --set parsing."""

    def test_types(self):
        assert parse_assignment("n=3") == ("n", 3)
        assert parse_assignment("x=-1.5") == ("x", -1.5)
        assert parse_assignment("name=Ada") == ("name", "Ada")
        assert parse_assignment("eq=a=b") == ("eq", "a=b")

    def test_invalid(self):
        with pytest.raises(typer.BadParameter):
            parse_assignment("novalue")


class TestRenderCommand:
    """Test `clause render`."""

    def test_render(self, runner, locales):
        result = runner.invoke(app, ["render", "Hello, {name}!", "--dir", str(locales), "--locale", "de", "--set", "name=Ada"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "Hallo, Ada!"

    def test_render_styled(self, runner, locales):
        result = runner.invoke(app, ["render", "{count:decimal} files", "-d", str(locales), "-l", "de", "-s", "count=12000"])
        assert result.exit_code == 0
        assert "12.000 Dateien" in result.stdout

    def test_render_missing_key(self, runner, locales):
        result = runner.invoke(app, ["render", "Bye, {name}", "-d", str(locales), "-s", "name=Ada"])
        assert result.exit_code == 0
        assert "Bye, Ada" in result.stdout
        assert "not found" in result.output

    def test_render_strict(self, runner, locales):
        result = runner.invoke(app, ["render", "Bye", "-d", str(locales), "--strict"])
        assert result.exit_code == 2
        assert "Key 'Bye' not found" in result.output

    def test_render_config_file(self, runner, locales, tmp_path):
        config_file = tmp_path / "clause.yaml"
        config_file.write_text("clause:\n  locale: de\n", encoding="utf-8")
        result = runner.invoke(app, ["render", "Hello, {name}!", "-d", str(locales), "-c", str(config_file), "-s", "name=Ada"])
        assert result.exit_code == 0
        assert "Hallo, Ada!" in result.stdout

    def test_render_invalid_escape(self, runner, locales):
        result = runner.invoke(app, ["render", "Hi", "-d", str(locales), "--escape", "ab"])
        assert result.exit_code == 2
        assert "Escape must be" in result.output


class TestCheckCommand:
    """Test `clause check`."""

    def test_consistent(self, runner, locales):
        result = runner.invoke(app, ["check", str(locales)])
        assert result.exit_code == 0
        assert "OK" in result.stdout

    def test_issues(self, runner, locales):
        (locales / "de" / "Localizable.strings").write_text('"Hello, @(name)!" = "Hallo!";\n', encoding="utf-8")
        result = runner.invoke(app, ["check", str(locales)])
        assert result.exit_code == 1
        assert "dropped_marker" in result.stdout
        assert "missing_key" in result.stdout

    def test_json(self, runner, locales):
        (locales / "de" / "Localizable.strings").write_text('"Hello, @(name)!" = "Hallo, @(user)!";\n', encoding="utf-8")
        result = runner.invoke(app, ["check", str(locales), "--format", "json"])
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        kinds = {issue["kind"] for issue in data["issues"]}
        assert kinds == {"dropped_marker", "unknown_marker", "missing_key"}
        assert data["load_failures"] == []

    def test_load_failure(self, runner, locales):
        (locales / "de" / "Localizable.strings").write_text('"broken" = ', encoding="utf-8")
        result = runner.invoke(app, ["check", str(locales), "--format", "json"])
        assert result.exit_code == 1
        assert len(json.loads(result.stdout)["load_failures"]) == 1

    def test_missing_directory(self, runner, tmp_path):
        result = runner.invoke(app, ["check", str(tmp_path / "nope")])
        assert result.exit_code == 2
