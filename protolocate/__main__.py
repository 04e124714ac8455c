"""Module entrypoint for running protolocate as ``python -m protolocate``."""

from __future__ import annotations

from protolocate.cli import main


if __name__ == "__main__":
    main()
