"""Entry point for running the package as a module."""

import sys

from uplinkwatch.main import run

if __name__ == "__main__":
    sys.exit(run())
