"""
Output reporting module.

Prints the retention plan and removal progress.
"""

from typing import List
from enum import Enum

from .analyzer import RetentionPlan
from .remover import RemovalStatus


class OutputLevel(Enum):
    """Output verbosity levels."""
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2


class Reporter:
    """
    Handles formatted output for kernprune operations.

    Every kept version is reported, and every removed version is reported
    together with its packages before any of them is purged.
    """

    def __init__(self, level: OutputLevel = OutputLevel.NORMAL):
        """
        Initialize the reporter.

        Args:
            level: Output verbosity level
        """
        self.level = level

    def print_current(self, version: str) -> None:
        """Print the running kernel version."""
        if self.level == OutputLevel.QUIET:
            return

        print(f"Current kernel: {version}")

    def print_plan(self, plan: RetentionPlan) -> None:
        """
        Print the retention decision of every installed kernel.

        Args:
            plan: Retention plan to display
        """
        if self.level == OutputLevel.QUIET:
            return

        for decision in plan.decisions:
            if decision.keep:
                if self.level == OutputLevel.VERBOSE:
                    print(f"Keeping kernel {decision.version} ({decision.reason})")
                else:
                    print(f"Keeping kernel {decision.version}")
            else:
                print(f"Kernel {decision.version} will be removed...")
                for pkg in decision.packages:
                    print(f"  {pkg}")

        print()
        print(f"{len(plan.kept)} kept, {len(plan.removed)} to remove.")

    def print_command(self, command: List[str], dry_run: bool = False) -> None:
        """
        Print a command that will be executed.

        Args:
            command: Command as list of arguments
            dry_run: Whether this is a dry run
        """
        if self.level == OutputLevel.QUIET:
            return

        cmd_str = " ".join(command)
        if dry_run:
            print(f"[DRY RUN] Would execute: {cmd_str}")
        else:
            print(f"Executing: {cmd_str}")

    def print_removal_start(self, package: str) -> None:
        """Print the package about to be purged."""
        if self.level == OutputLevel.QUIET:
            return

        print(f"  removing {package}")

    def print_removal_progress(self, package: str, status: RemovalStatus) -> None:
        """
        Print the result of purging a single package.

        Args:
            package: Package being removed
            status: Result of the removal
        """
        if self.level == OutputLevel.QUIET:
            return

        if status == RemovalStatus.SUCCESS:
            if self.level == OutputLevel.VERBOSE:
                print(f"  [ok] {package} purged")
        elif status == RemovalStatus.FAILED:
            print(f"  apt-get could not purge {package}, see its output above")

    def print_summary(self, removed: int, failed: int) -> None:
        """
        Print final summary statistics.

        Args:
            removed: Number of packages successfully purged
            failed: Number of packages that failed to purge
        """
        if self.level == OutputLevel.QUIET:
            return

        print()
        if removed > 0:
            print(f"Successfully removed {removed} package(s).")

        if failed > 0:
            print(f"apt-get could not purge {failed} package(s).")
            print("Packages that are not installed are left as they are.")

        if removed > 0 or failed > 0:
            print()
            print("Done.")

    def print_reboot_notice(self) -> None:
        """Print notice that a reboot is recommended."""
        if self.level == OutputLevel.QUIET:
            return

        print()
        print("A reboot is required to complete the package changes.")
        print("Run 'sudo reboot' to restart the system.")
