"""Tests for the change-review command line."""

import pytest

from change_review.cli import main


@pytest.fixture(autouse=True)
def workspace(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("REVIEW_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("REVIEW_COLOR", "false")
    (tmp_path / "app.py").write_text("a = 1\nb = 2\nc = 3\n")
    (tmp_path / "app.proposed").write_text("a = 1\nb = 20\nc = 3\n")
    return tmp_path


def test_diff(workspace, capsys):
    main(["diff", "app.py", "app.proposed", "--no-color"])

    out = capsys.readouterr().out
    assert "--- a/app.proposed" in out
    assert "@@ -1,3 +1,3 @@" in out
    assert "-b = 2" in out
    assert "+b = 20" in out
    assert "1 hunk(s), +1 -1" in out


def test_diff_identical(workspace, capsys):
    main(["diff", "app.py", "app.py"])
    assert "No changes." in capsys.readouterr().out


def test_summary_does_not_write(workspace, capsys):
    main(["summary", "-p", "app.py", "app.proposed"])

    out = capsys.readouterr().out
    assert "Files changed : 1" in out
    assert "Low Risk" in out
    assert "1 modified file" in out
    assert (workspace / "app.py").read_text() == "a = 1\nb = 2\nc = 3\n"


def test_review_auto_writes(workspace, capsys):
    main(["review", "-p", "app.py", "app.proposed", "--auto"])

    assert (workspace / "app.py").read_text() == "a = 1\nb = 20\nc = 3\n"
    assert "accepted" in capsys.readouterr().out


def test_review_auto_new_file(workspace):
    (workspace / "new.proposed").write_text("fresh\n")

    main(["review", "-p", "pkg/new.py", "new.proposed", "--auto"])

    assert (workspace / "pkg" / "new.py").read_text() == "fresh\n"


def test_logs_written(workspace):
    main(["summary", "-p", "app.py", "app.proposed"])
    assert list((workspace / "logs").glob("review_*.log"))


def test_unknown_command_exits(workspace):
    with pytest.raises(SystemExit):
        main(["bogus"])
