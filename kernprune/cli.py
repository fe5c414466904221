"""
Command-line interface for kernprune.

Provides argument parsing and orchestrates the kernel cleanup workflow.
"""

import sys
import argparse
from typing import Optional

from . import __version__
from .analyzer import RetentionPlan, plan_retention
from .config import Settings, DEFAULT_SETTINGS
from .detector import get_current_version, list_kernel_packages, get_installed_packages
from .errors import KernpruneError, RebootRequiredError
from .remover import (
    RemovalStatus,
    check_platform,
    check_root,
    generate_purge_command,
    purge_versions,
)
from .reporter import Reporter, OutputLevel
from .utils import needs_reboot


# Exit codes
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_REBOOT_REQUIRED = 2
EXIT_NOT_ROOT = -1
EXIT_PURGE_FAILED = -2


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="kernprune",
        description="Purge old Linux kernels, keeping the running and the newest two",
        epilog="Example: sudo kernprune --remove  # Purge old kernels",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    action = parser.add_mutually_exclusive_group()
    action.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the purge commands without running them",
    )
    action.add_argument(
        "--remove",
        action="store_true",
        help="Purge old kernels and headers (requires root)",
    )

    parser.add_argument(
        "--yes",
        action="store_true",
        help="Assume yes to the confirmation prompt (use with --remove)",
    )

    parser.add_argument(
        "--flavor",
        default=None,
        metavar="NAME",
        help=f"Kernel flavor suffix (default: {DEFAULT_SETTINGS.flavor})",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    return parser


def _setup_reporter(args) -> Reporter:
    """
    Set up reporter based on command-line arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        Reporter: Configured reporter instance
    """
    if args.quiet:
        output_level = OutputLevel.QUIET
    elif args.verbose:
        output_level = OutputLevel.VERBOSE
    else:
        output_level = OutputLevel.NORMAL

    return Reporter(output_level)


def _build_plan(args, settings: Settings, reporter: Reporter) -> RetentionPlan:
    """
    Detect the running and installed kernels and decide what to keep.

    Args:
        args: Parsed command-line arguments
        settings: Run configuration
        reporter: Reporter instance for output

    Returns:
        RetentionPlan: Decisions for every installed kernel version
    """
    if args.verbose:
        print("Detecting running kernel...")

    current_version = get_current_version(settings)
    reporter.print_current(current_version)

    if args.verbose:
        print("\nScanning installed kernel packages...")

    lines = list_kernel_packages(settings)

    if args.verbose:
        print(f"Found {len(get_installed_packages(lines))} installed kernel package(s)")
        print()

    return plan_retention(lines, current_version, flavor=settings.flavor, keep=settings.keep)


def _handle_removal(args, settings: Settings, reporter: Reporter, plan: RetentionPlan) -> int:
    """
    Handle the removal workflow including confirmation and execution.

    Args:
        args: Parsed command-line arguments
        settings: Run configuration
        reporter: Reporter instance for output
        plan: Retention plan with at least one version to remove

    Returns:
        int: Exit code
    """
    if args.dry_run:
        if not args.quiet:
            print()

        def show_command(decision, package):
            reporter.print_command(generate_purge_command(package, settings), dry_run=True)

        purge_versions(plan.decisions, settings, dry_run=True, on_start=show_command)
        if not args.quiet:
            print("[DRY RUN] No packages were removed.")
        return EXIT_OK

    if not args.remove:
        if not args.quiet:
            print("Run with --dry-run to see the purge commands")
            print("Run with --remove to purge old kernels (requires root)")
        return EXIT_OK

    if not args.yes and not args.quiet:
        print(f"\nAbout to purge {len(plan.packages)} package(s) of "
              f"{len(plan.removed)} kernel(s).")
        response = input("Continue? [y/N]: ").strip().lower()
        if response not in ('y', 'yes'):
            print("Aborted.")
            return EXIT_OK

    def announce(decision, package):
        reporter.print_removal_start(package)

    def report(decision, package, status):
        reporter.print_removal_progress(package, status)

    if not args.quiet:
        print()

    results = purge_versions(plan.decisions, settings, on_start=announce, on_result=report)

    success_count = sum(1 for _, status in results if status == RemovalStatus.SUCCESS)
    failed_count = len(results) - success_count
    reporter.print_summary(success_count, failed_count)

    if needs_reboot(settings.reboot_flag_file):
        reporter.print_reboot_notice()

    # apt-get rejects targets that are not installed; fail only if nothing was purged
    if failed_count > 0 and success_count == 0:
        return EXIT_PURGE_FAILED

    return EXIT_OK


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        int: Exit code:
            0 = success (kernels purged, plan shown, or nothing to remove)
            1 = fatal error (invalid version, failed query, not Linux)
            2 = a newer kernel is installed, reboot before cleaning up
            -1 = insufficient privileges (not root)
            -2 = no package could be purged
    """
    parser = create_parser()

    if argv is None:
        argv = sys.argv[1:]

    args = parser.parse_args(argv)

    if args.quiet and args.verbose:
        parser.error("--quiet and --verbose cannot be used together")

    if args.yes and not args.remove:
        parser.error("--yes can only be used with --remove")

    settings = DEFAULT_SETTINGS.with_overrides(flavor=args.flavor)

    # Both checks come before any system query
    if not check_platform():
        print("Error: kernprune can only be run on Linux.", file=sys.stderr)
        return EXIT_ERROR

    if args.remove and not check_root():
        print("Error: Root privileges required for package removal.", file=sys.stderr)
        print("Please run with sudo:", file=sys.stderr)
        print("  sudo kernprune --remove", file=sys.stderr)
        return EXIT_NOT_ROOT

    try:
        reporter = _setup_reporter(args)

        if not args.quiet:
            print("KernPrune v{}".format(__version__))

        plan = _build_plan(args, settings, reporter)
        reporter.print_plan(plan)

        if plan.removed:
            return _handle_removal(args, settings, reporter, plan)

        if not args.quiet:
            print("No old kernels to remove.")
        return EXIT_OK

    except RebootRequiredError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_REBOOT_REQUIRED

    except (KernpruneError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
