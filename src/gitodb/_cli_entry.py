"""Console script for ``gitodb``.

The library itself only needs dulwich; click comes with the ``cli`` extra.
This shim keeps ``import gitodb`` free of click and turns a missing click
into a one-line hint instead of a traceback.
"""

import sys


def main():
    try:
        from .cli import main as cli_main
    except ImportError as exc:
        print(
            f"gitodb: command-line tools unavailable ({exc}).\n"
            "Install them with:  pip install 'gitodb[cli]'",
            file=sys.stderr,
        )
        raise SystemExit(1)
    cli_main()
