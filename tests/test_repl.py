import io

import pytest

from rsql import NodeAllocator, Session
from rsql.repl import format_table, is_complete_statement, main, repl, run_buffer


def feed(monkeypatch, lines):
    monkeypatch.setattr("sys.stdin", io.StringIO("".join(line + "\n" for line in lines)))


def test_is_complete_statement():
    assert not is_complete_statement("SELECT * FROM t")
    assert not is_complete_statement("INSERT INTO t (a) VALUES ('x;")
    assert is_complete_statement("INSERT INTO t (a) VALUES ('x;');")


def test_format_table():
    out = format_table(["id", "name"], [["1", "ada"], ["22", None]])
    assert out.splitlines() == [
        "id | name",
        "---+-----",
        "1  | ada ",
        "22 | NULL",
    ]


def test_repl_multiline_statements(monkeypatch, capsys):
    feed(
        monkeypatch,
        [
            "CREATE DATABASE d;",
            "CREATE TABLE t (a INT,",
            "  b VARCHAR);",
            "INSERT INTO t (a, b) VALUES (1, 'x');",
            "SELECT * FROM t;",
            ".tables",
            ".schema t",
            ".databases",
            ".exit",
        ],
    )
    assert repl(Session()) == 0
    out = capsys.readouterr().out
    assert "Database d created" in out
    assert "Table t created" in out
    assert "rows_affected=1" in out
    assert "a | b" in out
    assert "(1 row(s))" in out
    assert "TABLE t (1 row(s))" in out
    assert "  - b VARCHAR" in out
    assert "d *" in out


def test_repl_reports_errors_and_continues(monkeypatch, capsys):
    feed(monkeypatch, ["SELECT id FROM;", "CREATE TABLE t (a);", "CREATE DATABASE ok;"])
    assert repl(Session()) == 0
    out = capsys.readouterr().out
    assert "Parse error: Expected IDENTIFIER at token ';'" in out
    assert "No database selected" in out
    assert "Database ok created" in out


def test_repl_ast_toggle(monkeypatch, capsys):
    feed(monkeypatch, [".ast", "CREATE DATABASE d;", ".bogus"])
    repl(Session())
    out = capsys.readouterr().out
    assert "syntax tree printing on" in out
    assert "CreateDatabase\n  Identifier: d" in out
    assert "Unknown command: .bogus" in out


@pytest.mark.parametrize("flag", [[], ["--show-ast"], ["--log-level", "DEBUG"]])
def test_main_exits_cleanly_on_eof(monkeypatch, flag):
    feed(monkeypatch, [])
    assert main(flag) == 0


def test_main_rejects_unknown_log_level():
    with pytest.raises(SystemExit):
        main(["--log-level", "LOUD"])


def test_run_buffer_parses_once_and_releases_trees(monkeypatch, capsys):
    allocators = []

    class TrackingAllocator(NodeAllocator):
        def __init__(self):
            super().__init__()
            allocators.append(self)

    monkeypatch.setattr("rsql.repl.NodeAllocator", TrackingAllocator)
    run_buffer(Session(), "CREATE DATABASE d;\nCREATE TABLE t (a INT);\n", show_ast=True)

    out = capsys.readouterr().out
    assert "CreateTable\n  Identifier: t" in out
    assert "Table t created" in out
    assert len(allocators) == 2
    assert all(a.created > 0 and a.live == 0 for a in allocators)


def test_run_buffer_releases_tree_when_execution_fails(monkeypatch, capsys):
    allocators = []

    class TrackingAllocator(NodeAllocator):
        def __init__(self):
            super().__init__()
            allocators.append(self)

    monkeypatch.setattr("rsql.repl.NodeAllocator", TrackingAllocator)
    run_buffer(Session(), "DROP TABLE t;", show_ast=False)

    assert "No database selected" in capsys.readouterr().out
    assert [a.live for a in allocators] == [0]
