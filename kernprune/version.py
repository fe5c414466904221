"""
Kernel version parsing and comparison.

Kernel versions on Debian/Ubuntu look like '3.13.0-24' (major.minor.patch-build),
usually followed by a flavor such as '-generic'. They are compared field by
field as integers, never as strings: '3.13.0-100' is newer than '3.13.0-99'.
"""

import re
import functools
from typing import NamedTuple

from .errors import InvalidFormatError


# Pattern: major.minor.patch-build (e.g. '3.13.0-24')
VERSION_PATTERN = r"(\d+)\.(\d+)\.(\d+)-(\d+)"

_VERSION_RE = re.compile(VERSION_PATTERN)


class VersionTuple(NamedTuple):
    """
    Parsed kernel version.

    Equality and ordering are the tuple's own: major first, then minor,
    patch and build.
    """
    major: int
    minor: int
    patch: int
    build: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}-{self.build}"


def parse_version(raw: str) -> VersionTuple:
    """
    Parse a kernel version string into a VersionTuple.

    The first 'major.minor.patch-build' substring is used, so surrounding
    text such as a '-generic' suffix or a package name prefix is ignored.

    Args:
        raw: Version string (e.g., '3.13.0-24' or '3.13.0-24-generic')

    Returns:
        VersionTuple: Parsed version

    Raises:
        InvalidFormatError: If no version substring is present
    """
    match = _VERSION_RE.search(raw)
    if not match:
        raise InvalidFormatError(raw)

    return VersionTuple(*(int(part) for part in match.groups()))


def compare_versions(version1: str, version2: str) -> int:
    """
    Compare two kernel version strings.

    Args:
        version1: First kernel version (e.g., '3.13.0-24')
        version2: Second kernel version (e.g., '3.13.0-100')

    Returns:
        int: -1 if version1 < version2, 0 if equal, 1 if version1 > version2

    Raises:
        InvalidFormatError: If either string is not a kernel version
    """
    v1 = parse_version(version1)
    v2 = parse_version(version2)

    for part1, part2 in zip(v1, v2):
        if part1 < part2:
            return -1
        elif part1 > part2:
            return 1

    return 0


# Sort key for raw version strings: sorted(versions, key=version_sort_key)
version_sort_key = functools.cmp_to_key(compare_versions)
