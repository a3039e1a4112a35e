"""
Main entry point for running the package as a module.

Uses the Click-based CLI from toolnav/cli/.
"""
import sys

from toolnav.cli import main

if __name__ == "__main__":
    sys.exit(main())
