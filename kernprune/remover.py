"""
Package removal module.

Purges kernel packages with apt-get, one package at a time, and checks the
platform and privilege requirements for doing so.
"""

import os
import sys
import subprocess
from typing import Callable, List, Optional, Tuple
from enum import Enum

from .analyzer import Action, RetentionDecision
from .config import Settings, DEFAULT_SETTINGS
from .errors import PreconditionError


class RemovalStatus(Enum):
    """Status of a package removal operation."""
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


def check_root() -> bool:
    """
    Check if the current process has root privileges.

    Returns:
        bool: True if running as root, False otherwise
    """
    try:
        return os.geteuid() == 0
    except AttributeError:
        # os.geteuid() not available on Windows
        return False


def check_platform() -> bool:
    """Check that we are running on Linux."""
    return sys.platform.startswith("linux")


def ensure_preconditions(require_root: bool = True) -> None:
    """
    Verify that kernels can be managed on this system.

    Args:
        require_root: Also require root privileges

    Raises:
        PreconditionError: If not on Linux, or root is required but missing
    """
    if not check_platform():
        raise PreconditionError("kernprune can only be run on Linux")

    if require_root and not check_root():
        raise PreconditionError("Root privileges required. Please run with sudo.")


def generate_purge_command(package: str, settings: Settings = DEFAULT_SETTINGS) -> List[str]:
    """
    Generate the apt-get command that purges one package.

    Args:
        package: Package name to purge
        settings: Configuration holding the apt-get path and arguments

    Returns:
        List[str]: Command as list of arguments (e.g., apt-get purge -y <pkg>)
    """
    if not package:
        raise ValueError("No package provided for removal")

    return [settings.apt_get_cmd, *settings.purge_args, package]


def purge_package(
    package: str,
    settings: Settings = DEFAULT_SETTINGS,
    dry_run: bool = False,
    quiet: bool = False,
) -> RemovalStatus:
    """
    Purge a single package.

    apt-get's output goes straight to the console, so the user sees why a
    purge failed; `quiet` discards it for callers that own stdout, such as
    the Ansible module. A failure is returned, not raised: the remaining
    packages are purged regardless. apt-get fails for names that are not
    installed, which is common for the flavored headers package.

    Args:
        package: Package name to purge
        settings: Configuration holding the apt-get path and arguments
        dry_run: If True, do not run anything
        quiet: If True, discard apt-get's output

    Returns:
        RemovalStatus: SUCCESS, FAILED, or SKIPPED in dry-run mode
    """
    if dry_run:
        return RemovalStatus.SKIPPED

    cmd = generate_purge_command(package, settings)
    try:
        result = subprocess.run(cmd, capture_output=quiet, check=False)
    except (OSError, subprocess.SubprocessError):
        return RemovalStatus.FAILED

    if result.returncode != 0:
        return RemovalStatus.FAILED

    return RemovalStatus.SUCCESS


def purge_versions(
    decisions: List[RetentionDecision],
    settings: Settings = DEFAULT_SETTINGS,
    dry_run: bool = False,
    quiet: bool = False,
    on_start: Optional[Callable[[RetentionDecision, str], None]] = None,
    on_result: Optional[Callable[[RetentionDecision, str, RemovalStatus], None]] = None,
) -> List[Tuple[str, RemovalStatus]]:
    """
    Purge the packages of every version marked for removal.

    Args:
        decisions: Retention decisions, oldest first
        settings: Configuration holding the apt-get path and arguments
        dry_run: If True, simulate removal without actually removing
        quiet: If True, discard apt-get's output
        on_start: Called with (decision, package) before each package
        on_result: Called with (decision, package, status) after each package

    Returns:
        List[Tuple[str, RemovalStatus]]: List of (package, status) tuples
    """
    results = []

    for decision in decisions:
        if decision.action != Action.REMOVE:
            continue

        for package in decision.packages:
            if on_start is not None:
                on_start(decision, package)
            status = purge_package(package, settings, dry_run=dry_run, quiet=quiet)
            results.append((package, status))
            if on_result is not None:
                on_result(decision, package, status)

    return results
