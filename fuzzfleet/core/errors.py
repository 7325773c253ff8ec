"""
Error types raised while loading configuration and creating instances.

Everything here is a startup error: it is raised before any fuzzer process
is launched and is expected to abort the program. Failures inside a running
instance are logged and retried instead.
"""


class FleetError(RuntimeError):
    """Base class for fuzzfleet errors."""


class ConfigError(FleetError):
    """Malformed, missing or out-of-range configuration."""


class UnknownSyscallError(ConfigError):
    """A syscall name from the enable/disable lists matches nothing in the catalog."""

    def __init__(self, name: str, kind: str = "enabled"):
        self.name = name
        self.kind = kind
        super().__init__(f"unknown {kind} syscall: {name}")


class BackendError(FleetError):
    """Base class for backend lookup and construction failures."""


class BackendRegistrationError(BackendError):
    pass


class UnknownBackendError(BackendError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown instance type '{name}'")


class DecodeError(BackendError):
    """Backend parameters could not be decoded."""


class NotFoundError(BackendError):
    """A binary required by the backend does not exist."""


class RangeError(BackendError):
    """A backend parameter is outside of its allowed range."""
