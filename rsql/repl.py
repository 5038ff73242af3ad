"""
rsql/repl.py

Interactive REPL (Read-Eval-Print Loop) for rsql.

Responsibilities:
- Provide a CLI shell for executing statements against an in-memory context.
- Support multiline input until a semicolon ';' is entered outside of quotes.
- Display SELECT results in a readable table format.
- Provide small meta-commands for introspection:
    - .help
    - .exit / .quit
    - .databases
    - .tables
    - .schema <table>
    - .ast (toggle syntax tree printing)

Usage:
    python -m rsql [--log-level LEVEL] [--show-ast]
"""

from __future__ import annotations

import argparse
import logging
from typing import Iterable

try:
    import readline  # noqa: F401
except ImportError:
    # readline is optional; if missing, REPL still works.
    readline = None  # type: ignore[assignment]

from .ast import NodeAllocator, format_tree
from .context import Context
from .errors import RsqlError
from .parser import parse_sql
from .results import CommandOk, QueryResult
from .session import Session, split_statements

logger = logging.getLogger(__name__)

PROMPT = "rsql> "
PROMPT_CONT = "....> "
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def is_complete_statement(buf: str) -> bool:
    """
    Decide whether the current buffer contains at least one complete statement.

    A statement is considered complete when a semicolon ';' appears outside of
    single-quoted string literals.
    """
    in_str = False
    for ch in buf:
        if ch == "'":
            in_str = not in_str
        elif ch == ";" and not in_str:
            return True
    return False


def format_table(columns: list[str], rows: list[list[object]]) -> str:
    """
    Pretty-print a QueryResult as an aligned ASCII table.

    Args:
        columns: Column header list.
        rows: Row values list.

    Returns:
        A formatted string suitable for printing to console.
    """
    cols = [str(c) for c in columns]
    str_rows = [[("NULL" if v is None else str(v)) for v in r] for r in rows]

    widths = [len(c) for c in cols]
    for r in str_rows:
        for i, cell in enumerate(r):
            widths[i] = max(widths[i], len(cell))

    def fmt_row(r: Iterable[str]) -> str:
        return " | ".join(cell.ljust(widths[i]) for i, cell in enumerate(r))

    sep = "-+-".join("-" * w for w in widths)

    out: list[str] = []
    out.append(fmt_row(cols))
    out.append(sep)
    for r in str_rows:
        out.append(fmt_row(r))
    return "\n".join(out)


def print_result(res) -> None:
    """Print a Session execution result."""
    if isinstance(res, CommandOk):
        print(res.message)
        if res.rows_affected:
            print(f"rows_affected={res.rows_affected}")
        return

    if isinstance(res, QueryResult):
        print(format_table(res.columns, res.rows))
        print(f"({len(res.rows)} row(s))")
        return

    print(res)


def cmd_databases(ctx: Context) -> None:
    """Meta-command: list databases, marking the current one."""
    if not ctx.databases:
        print("(no databases)")
        return
    for name in ctx.databases:
        print(f"{name} *" if name == ctx.current else name)


def cmd_tables(ctx: Context) -> None:
    """Meta-command: list tables of the current database."""
    if ctx.current is None:
        print("(no database selected)")
        return
    names = sorted(ctx.databases[ctx.current].tables)
    if not names:
        print("(no tables)")
        return
    for n in names:
        print(n)


def cmd_schema(ctx: Context, table: str) -> None:
    """Meta-command: print a table's columns."""
    if ctx.current is None:
        print("(no database selected)")
        return
    t = ctx.databases[ctx.current].tables.get(table)
    if not t:
        print(f"Table not found: {table}")
        return

    print(f"TABLE {t.name} ({len(t.rows)} row(s))")
    for c in t.columns:
        suffix = f" {c.type}" if c.type else ""
        print(f"  - {c.name}{suffix}")


def print_help() -> None:
    print("Meta commands:")
    print("  .help              show this help")
    print("  .databases         list databases (* marks the current one)")
    print("  .tables            list tables of the current database")
    print("  .schema <table>    show table columns")
    print("  .ast               toggle printing of the syntax tree")
    print("  .exit / .quit      exit")
    print()
    print("Statements end with ';'. Example:")
    print("  CREATE DATABASE shop;")
    print("  CREATE TABLE users (id INT, name VARCHAR);")
    print("  INSERT INTO users (id, name) VALUES (1, 'ada'), (2, 'bob');")
    print("  SELECT * FROM users WHERE id >= 2;")


def run_buffer(session: Session, buf: str, show_ast: bool) -> None:
    """Execute every statement in `buf`, stopping at the first error."""
    try:
        for stmt in split_statements(buf):
            nodes = NodeAllocator()
            tree = parse_sql(stmt, nodes)
            try:
                if show_ast:
                    print(format_tree(tree))
                print_result(session.evaluate(tree))
            finally:
                nodes.release(tree)
    except RsqlError as e:
        logger.debug("statement failed: %s", e)
        print(e)


def repl(session: Session, show_ast: bool = False) -> int:
    """
    Run the interactive REPL.

    Returns:
        Process exit code (0 on normal exit).
    """
    print("rsql REPL (in-memory)")
    print("Type .help for commands. End statements with ';'.")

    buf = ""
    while True:
        try:
            prompt = PROMPT if not buf else PROMPT_CONT
            line = input(prompt)
        except EOFError:
            print()
            return 0
        except KeyboardInterrupt:
            # Clear current buffer on Ctrl+C
            print()
            buf = ""
            continue

        line_stripped = line.strip()

        # Meta commands only apply if we're not in the middle of a multi-line buffer.
        if not buf and line_stripped.startswith("."):
            parts = line_stripped.split()
            cmd = parts[0].lower()

            if cmd in (".exit", ".quit"):
                return 0
            if cmd == ".help":
                print_help()
            elif cmd == ".databases":
                cmd_databases(session.context)
            elif cmd == ".tables":
                cmd_tables(session.context)
            elif cmd == ".schema":
                if len(parts) != 2:
                    print("Usage: .schema <table>")
                else:
                    cmd_schema(session.context, parts[1])
            elif cmd == ".ast":
                show_ast = not show_ast
                print(f"syntax tree printing {'on' if show_ast else 'off'}")
            else:
                print(f"Unknown command: {cmd}. Type .help")
            continue

        buf += line + "\n"
        if not is_complete_statement(buf):
            continue

        run_buffer(session, buf, show_ast)
        buf = ""


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="rsql", description="Interactive rsql shell")
    ap.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging level (default: WARNING)",
    )
    ap.add_argument("--show-ast", action="store_true", help="print the syntax tree of each statement")
    return ap


def main(argv: list[str] | None = None) -> int:
    """
    CLI entrypoint.

    Args:
        argv: Arguments without the program name (defaults to sys.argv[1:]).

    Returns:
        Exit code.
    """
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)
    return repl(Session(), show_ast=args.show_ast)
