from __future__ import annotations

"""Command line interface.

`main` is resolved on first call so that `python -m attrtable_reset.cli`
does not find the __main__ module already imported.
"""

__all__ = ["main"]


def main(argv: list[str] | None = None) -> int:
    from .__main__ import main as _main
    return _main(argv)
