"""
Instance contract shared by all backends.
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, FrozenSet, Mapping, Optional, Union

SyscallSet = Optional[FrozenSet[int]]

# Raw backend parameters: the decoded "params" object, or its JSON encoding.
RawParams = Union[Mapping[str, Any], str, bytes, None]


class Instance(ABC):
    """
    A supervised fuzzer instance.

    Backends return an Instance from their constructor. The owner calls
    run() once, typically on a dedicated thread; it does not return while
    the instance is supposed to be fuzzing.
    """

    @abstractmethod
    def run(self, stop: Optional[threading.Event] = None) -> None:
        """
        Run the instance, restarting the fuzzer whenever it exits.

        Args:
            stop: Optional event; once set, the instance shuts its fuzzer
                down and run() returns. Without it run() never returns.
        """


# ctor(workdir, syscalls, port, index, params) -> Instance
Constructor = Callable[[str, SyscallSet, int, int, RawParams], Instance]
