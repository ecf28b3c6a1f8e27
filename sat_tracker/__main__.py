"""CLI entry point exposed via ``python -m sat_tracker``."""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
