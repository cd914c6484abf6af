"""Allow running the package with: `python -m flagmatch`.

This delegates to :func:`flagmatch.cli.main`.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
