"""
KernPrune - Old Kernel Purge Tool

A small command-line utility that purges obsolete Linux kernel images and
headers on Debian/Ubuntu systems, keeping the running kernel and the
newest two installed versions.
"""

__version__ = "0.1.0"
__author__ = "KernPrune Contributors"
__license__ = "Apache-2.0"

from .cli import main

__all__ = ["main"]
