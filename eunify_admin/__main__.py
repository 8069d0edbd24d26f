"""Permet ``python -m eunify_admin``."""

from __future__ import annotations

from eunify_admin import main

if __name__ == "__main__":
    raise SystemExit(main())
