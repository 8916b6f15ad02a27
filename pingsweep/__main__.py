"""
Main entry point for pingsweep.
"""
import sys

from pingsweep.app import main


def main_entry():
    """Runs pingsweep and exits with its status code."""
    sys.exit(main())


if __name__ == "__main__":
    main_entry()
