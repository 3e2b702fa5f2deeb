"""
Family Days Reminder — Entry Point.

Single entry point: `python main.py serve` starts the daily reminder runs.
See `python main.py --help` for the other commands.
"""

import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from familydays.cli import main

if __name__ == "__main__":
    sys.exit(main())
