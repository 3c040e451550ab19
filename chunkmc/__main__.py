"""
Executable module for chunkmc.

Running ``python -m chunkmc`` is equivalent to running ``chunkmc``.
"""

from __future__ import annotations

import sys


def _print_startup_error(exc: ImportError) -> int:
    """Report a broken installation on stderr and return exit code 1."""
    sys.stderr.write("chunkmc could not start: a required module failed to import.\n")
    sys.stderr.write(f"Python version : {sys.version}\n")
    try:
        from chunkmc.__version__ import __version__

        sys.stderr.write(f"chunkmc version: {__version__}\n")
    except ImportError:
        sys.stderr.write("chunkmc version: <unknown>\n")
    sys.stderr.write(f"ImportError: {exc}\n")
    return 1


def main() -> int:
    """Entry point for ``python -m chunkmc``."""
    try:
        # Imported lazily so that a missing dependency is reported cleanly
        from chunkmc.cli import main as cli_main
    except ImportError as exc:
        return _print_startup_error(exc)

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
