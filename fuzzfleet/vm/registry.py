"""
Backend registry.

Maps backend names (the config "type") to instance constructors. All
registration happens during process initialization, before the first
create(); after that the registry is only read, so it needs no locking.
"""

from typing import Dict, List

from fuzzfleet.core.errors import BackendRegistrationError, UnknownBackendError
from fuzzfleet.utils.logging import get_logger
from fuzzfleet.vm.base import Constructor, Instance, RawParams, SyscallSet

logger = get_logger(__name__)


class BackendRegistry:
    """
    Name -> constructor mapping.

    Example:
        registry = BackendRegistry()
        registry.register("local", local.ctor)
        inst = registry.create("local", "/tmp/w", None, 4000, 0, params)
    """

    def __init__(self):
        self._ctors: Dict[str, Constructor] = {}

    def register(self, name: str, ctor: Constructor) -> None:
        """
        Register a backend constructor.

        Raises:
            BackendRegistrationError: name is already registered
        """
        if name in self._ctors:
            raise BackendRegistrationError(f"instance type '{name}' is already registered")
        self._ctors[name] = ctor
        logger.debug(f"Registered instance type '{name}'")

    def create(
        self,
        name: str,
        workdir: str,
        syscalls: SyscallSet,
        port: int,
        index: int,
        params: RawParams,
    ) -> Instance:
        """
        Construct an instance with the named backend.

        Constructor errors propagate unchanged.

        Raises:
            UnknownBackendError: no backend registered under name
        """
        ctor = self._ctors.get(name)
        if ctor is None:
            raise UnknownBackendError(name)
        return ctor(workdir, syscalls, port, index, params)

    def names(self) -> List[str]:
        """Registered backend names, sorted."""
        return sorted(self._ctors)

    def __contains__(self, name: str) -> bool:
        return name in self._ctors
