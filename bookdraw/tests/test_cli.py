"""
Tests for the command-line interface.

Commands run against the built-in sample catalog and a state file in
a temporary directory.
"""

import json

import pytest
from fastapi.testclient import TestClient

from ..cli import build_parser, main


@pytest.fixture
def run(tmp_path, monkeypatch, capsys):
    """Run the CLI; returns (exit code, stdout)."""
    monkeypatch.delenv("BOOKDRAW_CATALOG", raising=False)
    monkeypatch.delenv("BOOKDRAW_STATE_FILE", raising=False)
    state_file = str(tmp_path / "state.json")

    def _run(*args):
        code = 0
        try:
            main(["--state-file", state_file, *args])
        except SystemExit as e:
            code = e.code
        return code, capsys.readouterr().out

    return _run


class TestParser:

    def test_decision_choices(self):
        parser = build_parser()
        args = parser.parse_args(["decide", "Mistborn", "pause"])
        assert (args.series, args.decision) == ("Mistborn", "pause")

    def test_unknown_decision_rejected(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["decide", "Mistborn", "maybe"])

    def test_no_command(self, run):
        code, _ = run()
        assert code == 1


class TestCommands:
    """Tests for the state-changing commands."""

    def test_status_on_fresh_state(self, run, tmp_path):
        code, out = run("status")

        assert code == 0
        assert "Random draw" in out
        assert "Completed: 0 of 9 books" in out
        assert (tmp_path / "state.json").exists()

    def test_series_cycle(self, run):
        code, out = run("complete", "mistborn_1")
        assert code == 0
        assert "Completed The Final Empire" in out
        assert 'Decide whether to continue "Mistborn"' in out

        _, out = run("status")
        assert 'Decision required: continue, pause or drop "Mistborn"?' in out

        code, _ = run("draw")
        assert code == 1

        code, _ = run("decide", "Mistborn", "continue")
        assert code == 0

        code, out = run("draw")
        assert code == 0
        assert "Next up: The Well of Ascension" in out
        assert 'Continuing "Mistborn" series (Book 2)' in out

        _, out = run("status")
        assert 'Series lock: "Mistborn" continues with Book 2' in out
        assert "Reading: The Well of Ascension" in out

        code, out = run("pause", "Mistborn")
        assert code == 0
        assert 'Paused "Mistborn"' in out

        code, out = run("resume", "Mistborn")
        assert code == 0
        assert 'Resumed "Mistborn"' in out

    def test_pick(self, run):
        code, out = run("pick", "circe")

        assert code == 0
        assert "Now reading Circe" in out

    def test_complete_unknown(self, run):
        code, out = run("complete", "nope")

        assert code == 1
        assert "Error: Book nope not found" in out

    def test_reset(self, run):
        run("complete", "circe")

        code, out = run("reset")

        assert code == 0
        assert "State reset" in out
        _, out = run("status")
        assert "Completed: 0 of 9 books" in out


    def test_corrupt_state_file(self, run, tmp_path):
        (tmp_path / "state.json").write_text("{oops", encoding="utf-8")

        code, out = run("status")

        assert code == 1
        assert out.startswith("Error: Cannot read state file")


class TestListings:

    def test_books(self, run):
        code, out = run("books")

        assert code == 0
        assert "* circe" in out
        assert "Book 2 - must complete earlier books first" in out

    def test_series(self, run):
        code, out = run("series")

        assert code == 0
        assert "Mistborn: unstarted, 0/3 read, next Book 1" in out
        assert "The Murderbot Diaries: unstarted, 0/2 read, next Book 1" in out


class TestValidateCatalog:

    def test_valid_catalog(self, run, tmp_path):
        path = tmp_path / "books.json"
        path.write_text(json.dumps([{"id": "a", "title": "A", "author": "X"}]), encoding="utf-8")

        code, out = run("validate-catalog", str(path))

        assert code == 0
        assert "Books: 1" in out
        assert "Catalog is valid" in out

    def test_invalid_catalog(self, run, tmp_path):
        path = tmp_path / "books.json"
        path.write_text(json.dumps([
            {"id": "a", "title": "A", "author": "X"},
            {"id": "a", "title": "A again", "author": "X"},
        ]), encoding="utf-8")

        code, out = run("validate-catalog", str(path))

        assert code == 1
        assert "Duplicate book id: a" in out

    def test_unreadable_catalog(self, run, tmp_path):
        code, out = run("validate-catalog", str(tmp_path / "missing.json"))

        assert code == 1
        assert out.startswith("Error: Catalog not found")

    def test_bad_catalog_option(self, run, tmp_path):
        code, out = run("--catalog", str(tmp_path / "missing.json"), "status")

        assert code == 1
        assert "Error:" in out


class TestServe:
    """Tests for the serve command; uvicorn itself is replaced."""

    @pytest.fixture
    def served(self, monkeypatch):
        calls = []

        def fake_run(app, **kwargs):
            calls.append((app, kwargs))

        monkeypatch.setattr("uvicorn.run", fake_run)
        return calls

    def test_catalog_option_wins_over_environment(self, run, served, tmp_path, monkeypatch):
        """A broken BOOKDRAW_CATALOG does not matter when --catalog is given."""
        monkeypatch.setenv("BOOKDRAW_CATALOG", str(tmp_path / "nope.json"))
        path = tmp_path / "books.json"
        path.write_text(json.dumps([{"id": "a", "title": "A", "author": "X"}]), encoding="utf-8")

        code, _ = run("--catalog", str(path), "serve", "--port", "9000")

        assert code == 0
        app, kwargs = served[0]
        assert kwargs["port"] == 9000
        books = TestClient(app).get("/api/v1/books").json()
        assert books["count"] == 1
        assert books["books"][0]["book"]["id"] == "a"

    def test_bad_catalog_reports_error(self, run, served, tmp_path):
        code, out = run("--catalog", str(tmp_path / "nope.json"), "serve")

        assert code == 1
        assert out.startswith("Error: Catalog not found")
        assert served == []

    def test_log_level_option_reaches_uvicorn(self, run, served):
        code, _ = run("--log-level", "DEBUG", "serve")

        assert code == 0
        assert served[0][1]["log_level"] == "debug"

    def test_importing_app_module_builds_nothing(self):
        from ..api import app as app_module

        assert not hasattr(app_module, "app")
