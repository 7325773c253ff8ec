"""
Local instance backend.

Runs the fuzzer binary directly on the host. The fuzzer talks to the manager
over localhost and drives the executor itself; this module only keeps the
process alive: it restarts the fuzzer whenever it exits and kills it after
a fixed run time so that a wedged fuzzer does not stall an instance slot.
"""

import json
import os
import resource
import signal
import subprocess
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Optional

from fuzzfleet.core.errors import DecodeError, NotFoundError, RangeError
from fuzzfleet.utils.logging import get_logger
from fuzzfleet.vm.base import Instance, RawParams, SyscallSet

logger = get_logger(__name__)

MIN_PARALLEL = 1
MAX_PARALLEL = 100

EXCEPTION_TRACE = "/proc/sys/debug/exception-trace"


@dataclass
class LocalParams:
    """Backend-specific part of the config ("params")."""
    fuzzer: str = ""
    executor: str = ""
    parallel: int = 0

    @classmethod
    def decode(cls, raw: RawParams) -> "LocalParams":
        """
        Decode params from a mapping or its JSON encoding.

        Keys are case-insensitive: Fuzzer, Executor, Parallel.

        Raises:
            DecodeError: malformed JSON or wrongly typed values
        """
        if raw is None:
            raw = {}
        if isinstance(raw, (str, bytes, bytearray)):
            try:
                raw = json.loads(raw or "{}")
            except ValueError as e:
                raise DecodeError(f"failed to unmarshal local params: {e}") from e
        if not isinstance(raw, Mapping):
            raise DecodeError(f"failed to unmarshal local params: expected an object, got {raw!r}")

        data = {str(k).lower(): v for k, v in raw.items()}
        return cls(
            fuzzer=_decode_str(data.get("fuzzer"), "Fuzzer"),
            executor=_decode_str(data.get("executor"), "Executor"),
            parallel=_decode_int(data.get("parallel"), "Parallel"),
        )


def _decode_str(value: Any, key: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"failed to unmarshal local params: {key} must be a string, got {value!r}")
    return value


def _decode_int(value: Any, key: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"failed to unmarshal local params: {key} must be an integer, got {value!r}")
    return value


def ctor(
    workdir: str,
    syscalls: SyscallSet,
    port: int,
    index: int,
    params: RawParams,
) -> "LocalInstance":
    """
    Create a local instance.

    Args:
        workdir: Working directory of the fuzzer (created if missing)
        syscalls: Allowed syscall ids, None for all
        port: Manager RPC port
        index: Zero-based instance index
        params: Backend parameters {Fuzzer, Executor, Parallel}

    Returns:
        LocalInstance ready to run()

    Raises:
        DecodeError: params could not be decoded
        NotFoundError: fuzzer or executor binary is missing
        RangeError: Parallel outside [1, 100]
    """
    p = LocalParams.decode(params)
    if not p.fuzzer or not os.path.exists(p.fuzzer):
        raise NotFoundError(f"fuzzer binary '{p.fuzzer}' does not exist")
    if not p.executor or not os.path.exists(p.executor):
        raise NotFoundError(f"executor binary '{p.executor}' does not exist")
    if p.parallel == 0:
        p.parallel = MIN_PARALLEL
    if p.parallel < MIN_PARALLEL or p.parallel > MAX_PARALLEL:
        raise RangeError(f"bad parallel param: {p.parallel}, want [{MIN_PARALLEL}-{MAX_PARALLEL}]")

    _ensure_workdir(workdir)
    # The fuzzer crashes a lot; keep segfault reports out of dmesg.
    _disable_exception_trace()
    # No executor core files.
    _disable_core_dumps()

    return LocalInstance(
        fuzzer=p.fuzzer,
        executor=p.executor,
        parallel=p.parallel,
        workdir=workdir,
        syscalls=syscalls,
        index=index,
        manager_port=port,
    )


def _ensure_workdir(workdir: str) -> None:
    try:
        Path(workdir).mkdir(mode=0o770, parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(f"Failed to create workdir {workdir}: {e}")


def _disable_exception_trace() -> None:
    try:
        with open(EXCEPTION_TRACE, "w") as f:
            f.write("0")
    except OSError as e:
        logger.debug(f"Cannot disable exception trace: {e}")


def _disable_core_dumps() -> None:
    try:
        resource.setrlimit(resource.RLIMIT_CORE, (0, 0))
    except (ValueError, OSError) as e:
        logger.debug(f"Cannot set RLIMIT_CORE: {e}")


def kill_process_group(pid: int, attempts: int = 2) -> None:
    """
    SIGKILL a process group and its leader.

    Signals are sent to the group and to the pid, ``attempts`` times each,
    without waiting for delivery. Errors (already gone, no permission) are
    ignored.
    """
    for _ in range(attempts):
        try:
            os.killpg(pid, signal.SIGKILL)
        except OSError:
            pass
    for _ in range(attempts):
        try:
            os.kill(pid, signal.SIGKILL)
        except OSError:
            pass


def describe_exit(returncode: int) -> str:
    if returncode < 0:
        try:
            return f"killed by {signal.Signals(-returncode).name}"
        except ValueError:
            return f"killed by signal {-returncode}"
    return f"exit status {returncode}"


class LocalInstance(Instance):
    """
    Fuzzer running as a local process group.

    run() cycles forever through: launch -> wait for exit or timeout ->
    back off -> launch again. Launch failures back off the same way.
    """

    # seconds
    restart_delay = 10.0
    run_timeout = 3600.0
    # how often the watchdog looks at the stop event
    poll_interval = 1.0

    def __init__(
        self,
        fuzzer: str,
        executor: str,
        parallel: int,
        workdir: str,
        syscalls: SyscallSet,
        index: int,
        manager_port: int,
    ):
        self.fuzzer = fuzzer
        self.executor = executor
        self.parallel = parallel
        self.workdir = workdir
        self.syscalls = syscalls
        self.index = index
        self.manager_port = manager_port
        self.runs = 0

    @property
    def name(self) -> str:
        return f"local-{self.index}"

    def build_command(self) -> List[str]:
        """Build the fuzzer command line."""
        cmd = [
            self.fuzzer,
            "-name", self.name,
            "-saveprog",
            "-executor", self.executor,
            "-manager", f"localhost:{self.manager_port}",
            "-parallel", str(self.parallel),
        ]
        if self.syscalls:
            cmd.append("-calls=" + ",".join(str(c) for c in sorted(self.syscalls)))
        return cmd

    def run(self, stop: Optional[threading.Event] = None) -> None:
        stop = stop or threading.Event()
        logger.info(f"{self.name}: started")
        while not stop.is_set():
            cmd = self.build_command()
            logger.debug(f"{self.name}: starting {' '.join(cmd)}")
            try:
                proc = subprocess.Popen(
                    cmd,
                    cwd=self.workdir,
                    start_new_session=True,
                )
            except (OSError, subprocess.SubprocessError) as e:
                logger.error(f"{self.name}: failed to start fuzzer binary: {e}")
                stop.wait(self.restart_delay)
                continue

            self.runs += 1
            returncode = self._supervise(proc, stop)
            logger.info(f"{self.name}: fuzzer binary exited: {describe_exit(returncode)}")
            stop.wait(self.restart_delay)
        logger.info(f"{self.name}: stopped")

    def _supervise(self, proc: subprocess.Popen, stop: threading.Event) -> int:
        """Wait for proc to exit while a watchdog enforces run_timeout."""
        done = threading.Event()
        watchdog = threading.Thread(
            target=self._watchdog,
            args=(proc.pid, done, stop),
            name=f"{self.name}-watchdog",
            daemon=True,
        )
        watchdog.start()
        try:
            returncode = proc.wait()
        finally:
            done.set()
            watchdog.join()
        return returncode

    def _watchdog(self, pid: int, done: threading.Event, stop: threading.Event) -> None:
        deadline = time.monotonic() + self.run_timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.info(f"{self.name}: running for long enough, restarting")
                break
            if done.wait(min(remaining, self.poll_interval)):
                return
            if stop.is_set():
                logger.info(f"{self.name}: stopping fuzzer")
                break
        if not done.is_set():
            kill_process_group(pid)
