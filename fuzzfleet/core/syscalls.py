"""
Syscall catalog and allow-set resolution.

The catalog is a fixed table of syscall descriptions shipped with the package
(data/syscalls.json). Each entry gets a numeric id equal to its position in
the table. Several entries may describe the same underlying call, e.g.
``socket``, ``socket$inet`` and ``socket$unix`` all have call name ``socket``,
and a name from the configuration selects all of them.
"""

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from fuzzfleet.core.errors import ConfigError, UnknownSyscallError
from fuzzfleet.utils.logging import get_logger

logger = get_logger(__name__)

CATALOG_PATH = Path(__file__).parent.parent / "data" / "syscalls.json"

# The fuzzer generates these on its own, filtered or not.
REQUIRED_SYSCALLS = ("mmap", "clock_gettime")


@dataclass(frozen=True)
class Syscall:
    """One catalog entry."""
    id: int
    name: str
    call_name: str


class SyscallCatalog:
    """
    Read-only table of known syscalls.

    Example:
        catalog = SyscallCatalog.default()
        ids = catalog.ids_for("open")
    """

    def __init__(self, calls: Iterable[Syscall]):
        self._calls: List[Syscall] = list(calls)
        self._by_call: Dict[str, List[int]] = {}
        self._by_name: Dict[str, Syscall] = {}
        for call in self._calls:
            self._by_call.setdefault(call.call_name, []).append(call.id)
            self._by_name[call.name] = call

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "SyscallCatalog":
        """
        Build a catalog from entry names, numbering them in order.

        The call name is the part before ``$``.
        """
        return cls(
            Syscall(id=i, name=name, call_name=name.split("$", 1)[0])
            for i, name in enumerate(names)
        )

    @classmethod
    def load(cls, path: Path) -> "SyscallCatalog":
        """Load a catalog from a JSON file with a top-level ``calls`` list."""
        with open(path) as f:
            data = json.load(f)
        calls = []
        for i, entry in enumerate(data["calls"]):
            calls.append(Syscall(id=i, name=entry["name"], call_name=entry["call"]))
        logger.debug(f"Loaded {len(calls)} syscalls from {path}")
        return cls(calls)

    @classmethod
    def default(cls) -> "SyscallCatalog":
        """Return the catalog bundled with the package."""
        return _default_catalog()

    def __len__(self) -> int:
        return len(self._calls)

    def __iter__(self):
        return iter(self._calls)

    def all_ids(self) -> Set[int]:
        return {call.id for call in self._calls}

    def ids_for(self, call_name: str) -> List[int]:
        """Return ids of every entry whose call name equals ``call_name``."""
        return list(self._by_call.get(call_name, []))

    def get(self, name: str) -> Optional[Syscall]:
        """Look up a single entry by its exact name."""
        return self._by_name.get(name)


@lru_cache(maxsize=None)
def _default_catalog() -> SyscallCatalog:
    return SyscallCatalog.load(CATALOG_PATH)


def resolve_syscalls(
    enable: Iterable[str],
    disable: Iterable[str],
    catalog: Optional[SyscallCatalog] = None,
) -> Optional[FrozenSet[int]]:
    """
    Resolve enable/disable name lists into a set of syscall ids.

    Args:
        enable: Call names to allow; empty means start from the whole catalog
        disable: Call names to remove afterwards
        catalog: Catalog to resolve against (bundled one by default)

    Returns:
        None if both lists are empty (no filtering), otherwise the allowed ids.
        A concrete set always includes the ids of REQUIRED_SYSCALLS.

    Raises:
        UnknownSyscallError: a name matches no catalog entry
    """
    enable = list(enable)
    disable = list(disable)
    if not enable and not disable:
        return None

    catalog = catalog or SyscallCatalog.default()

    syscalls: Set[int] = set()
    if enable:
        for name in enable:
            ids = catalog.ids_for(name)
            if not ids:
                raise UnknownSyscallError(name, "enabled")
            syscalls.update(ids)
    else:
        syscalls = catalog.all_ids()

    for name in disable:
        ids = catalog.ids_for(name)
        if not ids:
            raise UnknownSyscallError(name, "disabled")
        syscalls.difference_update(ids)

    for name in REQUIRED_SYSCALLS:
        entry = catalog.get(name)
        if entry is None:
            raise ConfigError(f"syscall catalog has no entry for required call {name}")
        syscalls.add(entry.id)

    logger.debug(f"Resolved {len(syscalls)} enabled syscalls")
    return frozenset(syscalls)
