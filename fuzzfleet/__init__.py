"""
fuzzfleet - Fuzzer Instance Manager

Bootstraps and supervises a pool of fuzzer instances. Each instance runs on a
pluggable backend (the built-in one runs the fuzzer as a local process) and is
restarted whenever it exits or runs for too long.

Key Features:
- JSON configuration with validation
- Syscall allow-set resolution from enable/disable lists
- Name-based backend registry
- Supervised local fuzzer processes with watchdog and restart
"""

__version__ = "1.0.0"
__author__ = "fuzzfleet Contributors"

from fuzzfleet.core.config import ManagerConfig, load_config
from fuzzfleet.core.syscalls import SyscallCatalog, resolve_syscalls
from fuzzfleet.manager import create_instances, run_instances
from fuzzfleet.vm import BackendRegistry, Instance

__all__ = [
    "ManagerConfig",
    "load_config",
    "SyscallCatalog",
    "resolve_syscalls",
    "BackendRegistry",
    "Instance",
    "create_instances",
    "run_instances",
    "__version__",
]
