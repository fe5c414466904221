"""
Static configuration.

kernprune has no configuration file. Tool paths, purge arguments and the
kernel flavor live in a Settings object that is handed to every function
that talks to the system.
"""

from dataclasses import dataclass, replace
from typing import Tuple


@dataclass(frozen=True)
class Settings:
    """
    Configuration for one kernprune run.

    Attributes:
        uname_cmd: Path to uname, used to read the running kernel release
        dpkg_cmd: Path to dpkg, used to list kernel packages
        apt_get_cmd: Path to apt-get, used to purge packages
        purge_args: Arguments placed between apt-get and the package name
        flavor: Kernel flavor suffix of the running kernel and of image packages
        keep: Number of newest versions always kept
        reboot_flag_file: File created by Debian/Ubuntu when a reboot is pending
    """
    uname_cmd: str = "/bin/uname"
    dpkg_cmd: str = "/usr/bin/dpkg"
    apt_get_cmd: str = "/usr/bin/apt-get"
    purge_args: Tuple[str, ...] = ("purge", "-y")
    flavor: str = "generic"
    keep: int = 2
    reboot_flag_file: str = "/var/run/reboot-required"

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)


DEFAULT_SETTINGS = Settings()
