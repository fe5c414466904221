"""
Kernel retention module.

Decides which installed kernel versions are kept and which are purged:
the running kernel and the newest two versions stay, everything older goes.
"""

from enum import Enum
from typing import Iterable, List
from dataclasses import dataclass, field

from .detector import extract_kernel_versions
from .version import version_sort_key


class Action(Enum):
    """What happens to a kernel version."""
    KEEP = "keep"
    REMOVE = "remove"


@dataclass
class RetentionDecision:
    """
    Retention decision for one kernel version.

    Attributes:
        version: Kernel version (e.g., '3.13.0-24')
        action: KEEP or REMOVE
        packages: Packages to purge (empty when kept)
        reason: Why the version is kept ('running' or 'newest'), empty when removed
    """
    version: str
    action: Action
    packages: List[str] = field(default_factory=list)
    reason: str = ""

    @property
    def keep(self) -> bool:
        return self.action == Action.KEEP


@dataclass
class RetentionPlan:
    """
    Retention decisions for every installed kernel, oldest first.

    Attributes:
        current_version: Running kernel version
        decisions: One decision per installed version, in ascending order
    """
    current_version: str
    decisions: List[RetentionDecision]

    @property
    def kept(self) -> List[str]:
        return [d.version for d in self.decisions if d.action == Action.KEEP]

    @property
    def removed(self) -> List[str]:
        return [d.version for d in self.decisions if d.action == Action.REMOVE]

    @property
    def packages(self) -> List[str]:
        """All packages to purge, in removal order."""
        return [pkg for d in self.decisions for pkg in d.packages]


def purge_targets(version: str, flavor: str = "generic") -> List[str]:
    """
    Get the package names purged for a kernel version.

    The packages are not checked for existence; apt-get reports the ones
    that are not installed.

    Args:
        version: Kernel version (e.g., '3.13.0-24')
        flavor: Kernel flavor (e.g., 'generic')

    Returns:
        List[str]: Image, flavored headers and common headers package names
    """
    return [
        f"linux-image-{version}-{flavor}",
        f"linux-headers-{version}-{flavor}",
        f"linux-headers-{version}",
    ]


def decide_retention(
    versions: Iterable[str],
    current_version: str,
    flavor: str = "generic",
    keep: int = 2,
) -> List[RetentionDecision]:
    """
    Decide which kernel versions to keep and which to remove.

    Versions are sorted in ascending order by numeric comparison. The
    newest `keep` versions are kept by rank, and the running version is
    kept whatever its rank, even if it is not among the newest.

    Args:
        versions: Installed kernel versions
        current_version: Running kernel version
        flavor: Kernel flavor used to name the purge targets
        keep: Number of newest versions to keep

    Returns:
        List[RetentionDecision]: One decision per version, oldest first

    Raises:
        ValueError: If keep is lower than 1
        InvalidFormatError: If a version cannot be parsed
    """
    if keep < 1:
        raise ValueError(f"At least one kernel must be kept, got keep={keep}")

    ordered = sorted(set(versions), key=version_sort_key)
    total = len(ordered)

    decisions = []
    for position, version in enumerate(ordered, start=1):
        if version == current_version:
            decisions.append(RetentionDecision(version, Action.KEEP, reason="running"))
        elif position > total - keep:
            decisions.append(RetentionDecision(version, Action.KEEP, reason="newest"))
        else:
            decisions.append(RetentionDecision(
                version,
                Action.REMOVE,
                packages=purge_targets(version, flavor),
            ))

    return decisions


def plan_retention(
    lines: Iterable[str],
    current_version: str,
    flavor: str = "generic",
    keep: int = 2,
) -> RetentionPlan:
    """
    Build the retention plan from a dpkg listing.

    Args:
        lines: Raw 'dpkg -l' lines
        current_version: Running kernel version
        flavor: Kernel flavor
        keep: Number of newest versions to keep

    Returns:
        RetentionPlan: Decisions for every installed kernel version

    Raises:
        RebootRequiredError: If a newer kernel than the running one is installed
    """
    versions = extract_kernel_versions(lines, current_version)
    decisions = decide_retention(versions, current_version, flavor=flavor, keep=keep)
    return RetentionPlan(current_version=current_version, decisions=decisions)
