"""procrelay, run external commands and relay their output line by line."""

from .__about__ import (
    __author__,
    __copyright__,
    __description__,
    __license__,
    __package_name__,
    __title__,
    __version__,
)
from .cwd import evaluate_file, pushd
from .data_cmd import DataCommand
from .exc import (
    CommandFailed,
    ConfigurationError,
    ConsumerError,
    ProcessTimeout,
    ProcRelayException,
    SpawnError,
)
from .fork import fork_run
from .runner import ProcessRunner, RunOptions, StdinPolicy, run
from .shell import find_executable, which

__all__ = (
    "CommandFailed",
    "ConfigurationError",
    "ConsumerError",
    "DataCommand",
    "ProcRelayException",
    "ProcessRunner",
    "ProcessTimeout",
    "RunOptions",
    "SpawnError",
    "StdinPolicy",
    "__author__",
    "__copyright__",
    "__description__",
    "__license__",
    "__package_name__",
    "__title__",
    "__version__",
    "evaluate_file",
    "find_executable",
    "fork_run",
    "pushd",
    "run",
    "which",
)
