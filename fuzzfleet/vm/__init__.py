"""
Instance backends.

Backends are registered here, once, when the package is imported. Code that
creates instances goes through create(), which dispatches on the config
"type" without knowing about any particular backend.
"""

from fuzzfleet.vm import local
from fuzzfleet.vm.base import Constructor, Instance, RawParams, SyscallSet
from fuzzfleet.vm.registry import BackendRegistry

default_registry = BackendRegistry()
default_registry.register("local", local.ctor)


def register(name: str, ctor: Constructor) -> None:
    """Register a backend with the default registry. Call before create()."""
    default_registry.register(name, ctor)


def create(
    name: str,
    workdir: str,
    syscalls: SyscallSet,
    port: int,
    index: int,
    params: RawParams,
) -> Instance:
    """Create an instance with the default registry."""
    return default_registry.create(name, workdir, syscalls, port, index, params)


__all__ = [
    "BackendRegistry",
    "Constructor",
    "Instance",
    "RawParams",
    "SyscallSet",
    "default_registry",
    "register",
    "create",
]
