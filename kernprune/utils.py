"""
Utility functions.

Shared helper functions used across kernprune modules.
"""

import os


def needs_reboot(flag_file: str = "/var/run/reboot-required") -> bool:
    """
    Check if a system reboot is needed.

    Debian/Ubuntu create /var/run/reboot-required when an upgrade, such as
    a kernel or its removal, needs a reboot to take effect.

    Args:
        flag_file: Path of the reboot flag file

    Returns:
        bool: True if reboot is needed
    """
    return os.path.exists(flag_file)
