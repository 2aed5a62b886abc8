"""Tests for the termlog command line."""

import io

import pytest

from termlog import cli
from termlog.cli import build_parser, rewrite_bare_id, run


@pytest.fixture
def termlog(monkeypatch, temp_dir, log_client):
    """run() wired to the in-process app, from an empty working directory."""
    monkeypatch.chdir(temp_dir)
    monkeypatch.setattr(cli, "LogClient", lambda api_url, timeout=None: log_client)
    monkeypatch.setattr("termlog.prompt.time.sleep", lambda seconds: None)

    def invoke(*argv, stdin=""):
        monkeypatch.setattr("sys.stdin", io.StringIO(stdin))
        return run(list(argv))

    return invoke


class TestParser:

    @pytest.mark.parametrize("argv,expected", [
        (["12"], ["view", "12"]),
        (["-v", "12"], ["-v", "view", "12"]),
        (["--api-url", "http://x", "3"], ["--api-url", "http://x", "view", "3"]),
        (["-c", "5.toml", "list"], ["-c", "5.toml", "list"]),
        (["list", "-l", "2"], ["list", "-l", "2"]),
        (["new", "42"], ["new", "42"]),
        ([], []),
    ])
    def test_rewrite_bare_id(self, argv, expected):
        assert rewrite_bare_id(argv) == expected

    def test_limit_must_be_positive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["list", "--limit", "0"])

    def test_export_format_choices(self):
        args = build_parser().parse_args(["export", "-f", "text", "-o", "out.txt"])

        assert args.format == "text"
        assert str(args.output) == "out.txt"


class TestNew:

    def test_one_shot(self, termlog, log_client, capsys):
        assert termlog("new", "Deploy", "done", "--tags", "ops, prod") == 0

        assert "✅ Log created successfully! (ID: 1)" in capsys.readouterr().out
        entry = log_client.get(1).data
        assert entry.title == "Deploy done"
        assert entry.tags == ["ops", "prod"]

    def test_blank_one_shot(self, termlog, log_client, capsys):
        assert termlog("new", "  ") == 0

        assert "Log is required!" in capsys.readouterr().out
        assert log_client.list().data == []

    def test_interactive_title_only(self, termlog, log_client, capsys):
        assert termlog("new", stdin="Typed title\r") == 0

        assert "Log created successfully" in capsys.readouterr().out
        assert [e.title for e in log_client.list().data] == ["Typed title"]

    def test_interactive_full(self, termlog, log_client):
        termlog("new", "--full", stdin="T\rC\rx,y\r")

        entry = log_client.get(1).data
        assert (entry.title, entry.content, entry.tags) == ("T", "C", ["x", "y"])

    def test_interactive_cancel(self, termlog, log_client):
        assert termlog("new", stdin="half\x03") == 0
        assert log_client.list().data == []


class TestList:

    def test_empty(self, termlog, capsys):
        termlog("list")
        assert "No logs found." in capsys.readouterr().out

    def test_default_command_lists(self, termlog, log_client, capsys):
        log_client.create("one", tags=["t"])

        assert termlog() == 0

        out = capsys.readouterr().out
        assert "Found 1 log(s)" in out
        assert "#1 one" in out
        assert "Tags: t" in out
        assert "17.01.2026 12:00:00" in out

    def test_search_and_limit(self, termlog, log_client, capsys):
        for title in ["bug a", "feature", "bug b"]:
            log_client.create(title)

        termlog("list", "-s", "bug", "-l", "1")

        out = capsys.readouterr().out
        assert 'matching "bug"' in out
        assert "#1 bug a" in out
        assert "bug b" not in out


class TestSingleEntry:

    def test_bare_id_views(self, termlog, log_client, capsys):
        log_client.create("Look at me")

        termlog("1", stdin="q\n")

        out = capsys.readouterr().out
        assert "Log #1: Look at me" in out
        assert "Goodbye!" in out

    def test_delete(self, termlog, log_client, capsys):
        log_client.create("Remove me")

        termlog("delete", "1", stdin="y\n")

        assert "✅ Log #1 deleted successfully" in capsys.readouterr().out
        assert log_client.list().data == []

    def test_edit(self, termlog, log_client):
        log_client.create("Old")

        termlog("edit", "1", stdin="New\n\n\n")

        assert log_client.get(1).data.title == "New"

    def test_view_missing(self, termlog, capsys):
        assert termlog("view", "9") == 0
        assert "❌ Log not found" in capsys.readouterr().out


class TestExport:

    def test_exports_to_output(self, termlog, log_client, temp_dir, capsys):
        log_client.create("a")
        log_client.create("b")

        assert termlog("export", "-o", "out.md") == 0

        assert "✅ Successfully exported 2 logs to out.md" in capsys.readouterr().out
        assert (temp_dir / "out.md").exists()

    def test_nothing_to_export(self, termlog, temp_dir, capsys):
        assert termlog("export") == 0

        assert "No logs found to export." in capsys.readouterr().out
        assert not (temp_dir / "logs.md").exists()

    def test_format_from_config(self, termlog, log_client, temp_dir):
        (temp_dir / "termlog.toml").write_text('[export]\noutput = "report.txt"\nformat = "text"\n')
        log_client.create("a")

        termlog("export")

        assert (temp_dir / "report.txt").read_text(encoding="utf-8").startswith("EXPORTED LOGS")

    def test_failure_exit_status(self, termlog, log_client, temp_dir, capsys):
        log_client.create("a")
        (temp_dir / "blocked").write_text("a file, not a directory")

        assert termlog("export", "-o", "blocked/out.md") == 1
        assert "Export failed" in capsys.readouterr().err


class TestConfigErrors:

    def test_bad_config_exits_1(self, termlog, temp_dir, capsys):
        (temp_dir / "termlog.json").write_text("{broken")

        assert termlog("list") == 1
        assert "Error loading config" in capsys.readouterr().err


class TestMain:

    def test_exit_status(self, monkeypatch):
        monkeypatch.setattr(cli, "run", lambda argv: 3)

        with pytest.raises(SystemExit) as exc_info:
            cli.main()
        assert exc_info.value.code == 3

    def test_interrupt(self, monkeypatch):
        def interrupted(argv):
            raise KeyboardInterrupt

        monkeypatch.setattr(cli, "run", interrupted)

        with pytest.raises(SystemExit) as exc_info:
            cli.main()
        assert exc_info.value.code == 130
