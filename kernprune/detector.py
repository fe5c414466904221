"""
Kernel detection module.

Reads the running kernel release and the dpkg listing of kernel packages,
and extracts the set of installed kernel versions from that listing.
"""

import re
import subprocess
from typing import Iterable, List, Optional, Set
from dataclasses import dataclass

from .config import Settings, DEFAULT_SETTINGS
from .errors import InvalidVersionFormatError, RebootRequiredError
from .version import VERSION_PATTERN, compare_versions


# dpkg status of a fully installed package
INSTALLED_STATUS = "ii"

# One row of 'dpkg -l linux-*' describing a kernel image or headers package
# Example: ii  linux-headers-3.13.0-24-generic  3.13.0-24.47  amd64  ...
_LISTING_RE = re.compile(
    r"^(?P<status>\S{2,3})\s+"
    r"(?P<name>linux-(?P<kind>image|headers)-(?P<version>" + VERSION_PATTERN + r")\S*)"
)


@dataclass
class InstalledPackage:
    """
    A kernel package row from the dpkg listing.

    Attributes:
        status: dpkg status code (e.g., 'ii' installed, 'rc' config-files only)
        name: Package name (e.g., 'linux-image-3.13.0-24-generic')
        kind: 'image' or 'headers'
        version: Kernel version carried by the name (e.g., '3.13.0-24')
    """
    status: str
    name: str
    kind: str
    version: str

    @property
    def installed(self) -> bool:
        return self.status == INSTALLED_STATUS


def parse_listing_line(line: str) -> Optional[InstalledPackage]:
    """
    Parse one dpkg listing line.

    Args:
        line: Raw line of 'dpkg -l' output

    Returns:
        Optional[InstalledPackage]: The kernel package on this line, or None
        for report headers, short lines and non-kernel packages
    """
    match = _LISTING_RE.match(line)
    if not match:
        return None

    return InstalledPackage(
        status=match.group("status"),
        name=match.group("name"),
        kind=match.group("kind"),
        version=match.group("version"),
    )


def get_running_kernel(settings: Settings = DEFAULT_SETTINGS) -> str:
    """
    Detect the currently running kernel release.

    Args:
        settings: Configuration holding the uname path

    Returns:
        str: Running kernel release (e.g., '3.13.0-24-generic')

    Raises:
        RuntimeError: If unable to detect the running kernel
    """
    try:
        result = subprocess.run(
            [settings.uname_cmd, "-r"],
            capture_output=True,
            text=True,
            check=True,
        )
    except (subprocess.CalledProcessError, OSError) as e:
        raise RuntimeError(f"Failed to detect running kernel: {e}")

    kernel_release = result.stdout.strip()
    if not kernel_release:
        raise RuntimeError("uname returned empty kernel version")

    return kernel_release


def strip_flavor(kernel_release: str, flavor: str = "generic") -> str:
    """
    Strip the flavor suffix from a kernel release.

    Examples:
        '3.13.0-24-generic' -> '3.13.0-24'
        '5.15.0-82-lowlatency' (flavor='lowlatency') -> '5.15.0-82'

    Args:
        kernel_release: Output of 'uname -r'
        flavor: Expected flavor suffix, without the leading '-'

    Returns:
        str: Kernel version without the flavor

    Raises:
        InvalidVersionFormatError: If the release is not exactly '<version>-<flavor>'
    """
    release = kernel_release.strip()
    pattern = "^" + VERSION_PATTERN + "-" + re.escape(flavor) + "$"
    match = re.match(pattern, release)
    if not match:
        raise InvalidVersionFormatError(release, flavor)

    # Everything up to the flavor separator
    return release[: -(len(flavor) + 1)]


def get_current_version(settings: Settings = DEFAULT_SETTINGS) -> str:
    """
    Get the running kernel version without its flavor suffix.

    Raises:
        RuntimeError: If uname fails
        InvalidVersionFormatError: If the release does not match the flavor
    """
    return strip_flavor(get_running_kernel(settings), settings.flavor)


def list_kernel_packages(settings: Settings = DEFAULT_SETTINGS) -> List[str]:
    """
    List kernel related packages known to dpkg.

    Runs 'dpkg -l linux-*'. dpkg exits with status 1 when nothing matches
    the pattern; that is an empty listing, not an error.

    Args:
        settings: Configuration holding the dpkg path

    Returns:
        List[str]: Raw listing lines, report header included

    Raises:
        RuntimeError: If unable to query installed packages
    """
    try:
        result = subprocess.run(
            [settings.dpkg_cmd, "-l", "linux-*"],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        raise RuntimeError(f"Failed to query installed kernels: {e}")

    if result.returncode not in (0, 1):
        raise RuntimeError(
            f"dpkg -l failed with exit code {result.returncode}: {result.stderr.strip()}"
        )

    return result.stdout.splitlines()


def extract_kernel_versions(lines: Iterable[str], current_version: str) -> Set[str]:
    """
    Extract the set of installed kernel versions from a dpkg listing.

    Only installed ('ii') linux-image-* and linux-headers-* rows count; every
    other line is skipped. Image and headers packages of one version collapse
    into a single entry.

    Each version is checked against the running one as soon as it is read:
    a newer installed kernel means the system has not been rebooted into it
    yet, and nothing may be removed until it has.

    Args:
        lines: Raw 'dpkg -l' lines
        current_version: Running kernel version without flavor (e.g., '3.13.0-24')

    Returns:
        Set[str]: Installed kernel versions (e.g., {'3.13.0-24', '3.13.0-32'})

    Raises:
        RebootRequiredError: If an installed version is newer than current_version
        InvalidFormatError: If current_version is not a kernel version
    """
    versions = set()

    for line in lines:
        package = parse_listing_line(line)
        if package is None or not package.installed:
            continue

        if compare_versions(package.version, current_version) > 0:
            raise RebootRequiredError(package.version, current_version)

        versions.add(package.version)

    return versions


def get_installed_packages(lines: Iterable[str]) -> List[InstalledPackage]:
    """
    Get the installed kernel packages from a dpkg listing.

    Args:
        lines: Raw 'dpkg -l' lines

    Returns:
        List[InstalledPackage]: Installed kernel packages in listing order
    """
    packages = []
    for line in lines:
        package = parse_listing_line(line)
        if package is not None and package.installed:
            packages.append(package)
    return packages
