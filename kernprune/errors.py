"""
Exceptions raised by kernprune.

Every error here is fatal to a run: the CLI reports it and exits before
the first package is purged.
"""


class KernpruneError(Exception):
    """Base class for all kernprune errors."""

    pass


class InvalidFormatError(KernpruneError, ValueError):
    """Raised when a string does not contain a 'major.minor.patch-build' version."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid kernel version format: {value!r}")


class InvalidVersionFormatError(KernpruneError, ValueError):
    """Raised when the running kernel release is not '<version>-<flavor>'."""

    def __init__(self, value: str, flavor: str):
        self.value = value
        self.flavor = flavor
        super().__init__(
            f"Invalid running kernel version {value!r} (expected x.y.z-n-{flavor})"
        )


class RebootRequiredError(KernpruneError):
    """Raised when an installed kernel is newer than the running one."""

    def __init__(self, installed: str, running: str):
        self.installed = installed
        self.running = running
        super().__init__(
            f"Kernel {installed} is newer than the running kernel {running}. "
            "Reboot the system and run kernprune again."
        )


class PreconditionError(KernpruneError):
    """Raised when the platform or privilege requirements are not met."""

    pass
