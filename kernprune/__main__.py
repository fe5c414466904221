"""
Entry point for running kernprune as a module.

Usage:
    python -m kernprune [options]
"""

import sys
from kernprune.cli import main

if __name__ == "__main__":
    sys.exit(main())
