"""Module entry point for `python -m node_bootstrap`."""

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
