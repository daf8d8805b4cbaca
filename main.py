"""Main entry point for the voice tally application."""
from __future__ import annotations

import sys

from dotenv import load_dotenv

from app.startup import run_application


def main() -> None:
    """Application entry point."""
    # .env in the current or a parent directory; shell variables still win
    load_dotenv()
    sys.exit(run_application())


__all__ = ["main"]

if __name__ == "__main__":
    main()
