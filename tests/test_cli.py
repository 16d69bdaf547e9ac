from pathlib import Path

from typer.testing import CliRunner

from std_score.cli import app


runner = CliRunner()


def _write(tmp_path: Path, name: str, html: str) -> Path:
    path = tmp_path / name
    path.write_text(html, encoding="utf-8")
    return path


def test_compare_prints_sorted_table(tmp_path: Path, make_html) -> None:
    a = _write(tmp_path, "a.html", make_html([("1", "Bob", "100"), ("2", "Alice", "80")]))
    b = _write(tmp_path, "b.html", make_html([("1", "Alice", "50"), ("2", "Bob", "25")]))
    result = runner.invoke(app, ["compare", str(a), str(b)])
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0].split(" | ")[0].strip() == "Name"
    assert "a.html Std" in lines[0] and "b.html Raw" in lines[0]
    # Alice averages 90, Bob 75
    assert lines[2].startswith("Alice")
    assert "90.00" in lines[2]
    assert lines[3].startswith("Bob")


def test_compare_reports_unparseable_file(tmp_path: Path, make_html) -> None:
    good = _write(tmp_path, "good.html", make_html([("1", "Bob", "100")]))
    bad = _write(tmp_path, "bad.html", "<html><body><p>nothing</p></body></html>")
    result = runner.invoke(app, ["compare", str(good), str(bad)])
    assert result.exit_code == 0
    assert "Parsing failed bad.html" in result.output


def test_compare_fails_when_nothing_parses(tmp_path: Path) -> None:
    bad = _write(tmp_path, "bad.html", "<html><body></body></html>")
    result = runner.invoke(app, ["compare", str(bad)])
    assert result.exit_code == 1


def test_compare_with_alias_file_and_precision(tmp_path: Path, make_html) -> None:
    aliases = _write(tmp_path, "aliases.yaml", "bob-x: Bob X\n")
    a = _write(tmp_path, "a.html", make_html([("1", "BOB-X", "3"), ("2", "Alice", "1")]))
    result = runner.invoke(app, ["compare", str(a), "--aliases", str(aliases), "--precision", "0"])
    assert result.exit_code == 0, result.output
    assert "Bob X" in result.output
    assert "33" in result.output
    assert "33.3" not in result.output


def test_compare_rejects_bad_alias_file(tmp_path: Path, make_html) -> None:
    aliases = _write(tmp_path, "aliases.yaml", "bob: Bob\nBob: Robert\n")
    a = _write(tmp_path, "a.html", make_html([("1", "Bob", "3")]))
    result = runner.invoke(app, ["compare", str(a), "--aliases", str(aliases)])
    assert result.exit_code == 2


def test_compare_sort_by_file_requires_label(tmp_path: Path, make_html) -> None:
    a = _write(tmp_path, "a.html", make_html([("1", "Bob", "3")]))
    assert runner.invoke(app, ["compare", str(a), "--sort", "raw"]).exit_code == 2
    assert runner.invoke(app, ["compare", str(a), "--sort", "raw", "--file", "zzz"]).exit_code == 2
    assert runner.invoke(app, ["compare", str(a), "--sort", "raw", "--file", "a.html"]).exit_code == 0


def test_compare_shows_diagnostics(tmp_path: Path, make_html) -> None:
    a = _write(tmp_path, "a.html", make_html([("1", "Bob", "3"), ("2", "Eve")]))
    result = runner.invoke(app, ["compare", str(a), "--show-diagnostics"])
    assert result.exit_code == 0
    assert "[row_skipped] a.html row 2" in result.output


def test_aliases_command_lists_default_table() -> None:
    result = runner.invoke(app, ["aliases"])
    assert result.exit_code == 0
    assert "cqyc-wht -> CQYC-王鸿天" in result.output


def test_compare_sort_by_name(tmp_path: Path, make_html) -> None:
    a = _write(tmp_path, "a.html", make_html([("1", "Zed", "9"), ("2", "Amy", "5"), ("3", "Max", "7")]))
    result = runner.invoke(app, ["compare", str(a), "--sort", "name"])
    assert result.exit_code == 0, result.output
    names = [line.split(" | ")[0].strip() for line in result.output.splitlines()[2:5]]
    assert names == ["Amy", "Max", "Zed"]

    result = runner.invoke(app, ["compare", str(a), "--sort", "name", "--descending"])
    names = [line.split(" | ")[0].strip() for line in result.output.splitlines()[2:5]]
    assert names == ["Zed", "Max", "Amy"]


def test_compare_rejects_both_orders(tmp_path: Path, make_html) -> None:
    a = _write(tmp_path, "a.html", make_html([("1", "Bob", "3")]))
    result = runner.invoke(app, ["compare", str(a), "--ascending", "--descending"])
    assert result.exit_code == 2
