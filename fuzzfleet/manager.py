"""
Instance pool management.

Creates one instance per configured slot and runs each of them on its own
thread. Instances never talk to each other; the manager only starts them and
waits.
"""

import copy
import threading
import time
from typing import FrozenSet, List, Optional

from fuzzfleet.core.config import ManagerConfig
from fuzzfleet.utils.logging import get_logger
from fuzzfleet.vm import Instance, default_registry
from fuzzfleet.vm.registry import BackendRegistry

logger = get_logger(__name__)

# seconds to wait for the instance threads after Ctrl-C
SHUTDOWN_TIMEOUT = 10.0


def create_instances(
    cfg: ManagerConfig,
    syscalls: Optional[FrozenSet[int]],
    registry: Optional[BackendRegistry] = None,
) -> List[Instance]:
    """
    Create cfg.count instances of backend cfg.type.

    Args:
        cfg: Loaded manager config
        syscalls: Resolved syscall set shared by all instances
        registry: Backend registry (the package default if omitted)

    Returns:
        Instances, index i at position i

    Raises:
        BackendError: unknown backend or a constructor failure; nothing is
            started in that case
    """
    registry = registry or default_registry
    instances = []
    for i in range(cfg.count):
        # each constructor gets its own params; cfg is shared
        params = copy.deepcopy(cfg.params)
        inst = registry.create(cfg.type, cfg.workdir, syscalls, cfg.port, i, params)
        instances.append(inst)
    logger.info(f"Created {len(instances)} '{cfg.type}' instances")
    return instances


def run_instances(
    instances: List[Instance],
    stop: Optional[threading.Event] = None,
) -> None:
    """
    Run every instance on a dedicated daemon thread and wait for them.

    Unless someone sets stop this blocks for the life of the process.
    KeyboardInterrupt sets stop so that every instance kills its fuzzer;
    the threads then get SHUTDOWN_TIMEOUT seconds before it is re-raised.
    """
    stop = stop or threading.Event()
    threads = []
    for i, inst in enumerate(instances):
        t = threading.Thread(
            target=inst.run,
            args=(stop,),
            name=f"instance-{i}",
            daemon=True,
        )
        t.start()
        threads.append(t)

    try:
        for t in threads:
            t.join()
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping instances")
        stop.set()
        deadline = time.monotonic() + SHUTDOWN_TIMEOUT
        for t in threads:
            t.join(max(0.0, deadline - time.monotonic()))
        alive = [t.name for t in threads if t.is_alive()]
        if alive:
            logger.warning(f"Instances still running after shutdown: {', '.join(alive)}")
        raise
