"""Configuration, syscall catalog and error types."""

from fuzzfleet.core.config import ManagerConfig, load_config
from fuzzfleet.core.errors import (
    BackendError,
    BackendRegistrationError,
    ConfigError,
    DecodeError,
    FleetError,
    NotFoundError,
    RangeError,
    UnknownBackendError,
    UnknownSyscallError,
)
from fuzzfleet.core.syscalls import Syscall, SyscallCatalog, resolve_syscalls

__all__ = [
    "ManagerConfig",
    "load_config",
    "Syscall",
    "SyscallCatalog",
    "resolve_syscalls",
    "FleetError",
    "ConfigError",
    "UnknownSyscallError",
    "BackendError",
    "BackendRegistrationError",
    "UnknownBackendError",
    "DecodeError",
    "NotFoundError",
    "RangeError",
]
