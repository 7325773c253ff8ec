"""
Manager configuration loading and validation.
"""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional, Tuple

from fuzzfleet.core.errors import ConfigError
from fuzzfleet.core.syscalls import SyscallCatalog, resolve_syscalls
from fuzzfleet.utils.logging import get_logger

logger = get_logger(__name__)

MIN_COUNT = 1
MAX_COUNT = 1000

REQUIRED_STRINGS = ("name", "http", "master", "workdir", "vmlinux", "type")


def _as_str(value: Any, *, key: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigError(f"config param {key} must be a string, got {value!r}")
    return value


def _as_int(value: Any, *, key: str) -> int:
    if value is None:
        return 0
    # bool is an int subclass, but "count": true is a mistake; 2.0 is not an int either
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"config param {key} must be an integer, got {value!r}")
    return value


def _as_bool(value: Any, *, key: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigError(f"config param {key} must be a boolean, got {value!r}")
    return value


def _as_str_list(value: Any, *, key: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"config param {key} must be a list of strings, got {value!r}")
    return tuple(value)


def _as_dict(value: Any, *, key: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"config param {key} must be an object, got {value!r}")
    return dict(value)


@dataclass(frozen=True)
class ManagerConfig:
    """
    Process-wide manager configuration.

    Loaded once at startup and shared read-only with every instance
    constructor. The freeze is shallow: ``params`` stays a plain dict, and
    create_instances() hands each constructor its own copy of it.
    """
    name: str
    http: str
    master: str
    workdir: str
    vmlinux: str
    type: str
    count: int
    port: int = 0
    nocover: bool = False
    params: Dict[str, Any] = field(default_factory=dict)
    enable_syscalls: Tuple[str, ...] = ()
    disable_syscalls: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ManagerConfig":
        """
        Create and validate a config from a decoded JSON object.

        Keys are matched case-insensitively, so ``Enable_Syscalls`` and
        ``enable_syscalls`` are the same key. Unknown keys are ignored.

        Raises:
            ConfigError: on wrong types, empty required fields or bad count
        """
        if not isinstance(data, dict):
            raise ConfigError("config file must contain a JSON object")
        raw = {str(k).lower(): v for k, v in data.items()}

        cfg = cls(
            name=_as_str(raw.get("name"), key="name"),
            http=_as_str(raw.get("http"), key="http"),
            master=_as_str(raw.get("master"), key="master"),
            workdir=_as_str(raw.get("workdir"), key="workdir"),
            vmlinux=_as_str(raw.get("vmlinux"), key="vmlinux"),
            type=_as_str(raw.get("type"), key="type"),
            count=_as_int(raw.get("count"), key="count"),
            port=_as_int(raw.get("port"), key="port"),
            nocover=_as_bool(raw.get("nocover"), key="nocover"),
            params=_as_dict(raw.get("params"), key="params"),
            enable_syscalls=_as_str_list(raw.get("enable_syscalls"), key="enable_syscalls"),
            disable_syscalls=_as_str_list(raw.get("disable_syscalls"), key="disable_syscalls"),
        )
        cfg.validate()
        return cfg

    @classmethod
    def load(cls, config_path: str) -> "ManagerConfig":
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to config file

        Returns:
            Validated ManagerConfig
        """
        path = Path(config_path)
        try:
            text = path.read_text()
        except OSError as e:
            raise ConfigError(f"failed to read config file: {e}") from e
        try:
            data = json.loads(text)
        except ValueError as e:
            raise ConfigError(f"failed to parse config file: {e}") from e
        return cls.from_dict(data)

    def validate(self) -> None:
        for key in REQUIRED_STRINGS:
            if not getattr(self, key):
                raise ConfigError(f"config param {key} is empty")
        if self.count < MIN_COUNT or self.count > MAX_COUNT:
            raise ConfigError(
                f"invalid config param count: {self.count}, want [{MIN_COUNT}, {MAX_COUNT}]"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)


def load_config(
    config_path: str,
    catalog: Optional[SyscallCatalog] = None,
) -> Tuple[ManagerConfig, Optional[FrozenSet[int]]]:
    """
    Load the manager config and resolve its syscall allow-set.

    Args:
        config_path: Path to the JSON config file
        catalog: Syscall catalog (bundled one by default)

    Returns:
        (config, syscalls) where syscalls is None when no filtering was asked for

    Raises:
        ConfigError: invalid config, including unknown syscall names
    """
    cfg = ManagerConfig.load(config_path)
    syscalls = resolve_syscalls(cfg.enable_syscalls, cfg.disable_syscalls, catalog)
    logger.debug(f"Loaded config '{cfg.name}' from {config_path}: type={cfg.type} count={cfg.count}")
    return cfg, syscalls
