"""
rsql/__main__.py

Package entry point for running the rsql shell as a module:

    python -m rsql [--log-level LEVEL] [--show-ast]

This also serves as the target for the console script entry point defined in
pyproject.toml:

    rsql [--log-level LEVEL] [--show-ast]
"""

from __future__ import annotations

from .repl import main

if __name__ == "__main__":
    raise SystemExit(main())
