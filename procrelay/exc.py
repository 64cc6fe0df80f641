"""Provide exceptions used by procrelay.

procrelay.exc
~~~~~~~~~~~~~

Notes
-----
Exceptions in this module inherit from :exc:`ProcRelayException`.
"""

from __future__ import annotations

import subprocess
import typing as t

if t.TYPE_CHECKING:
    from procrelay._internal.types import CommandSpec


def _format_command(command: CommandSpec | None) -> str:
    if command is None:
        return ""
    if isinstance(command, (str, bytes)):
        return str(command)
    return subprocess.list2cmdline([str(arg) for arg in command])


class ProcRelayException(Exception):
    """Base exception for all procrelay errors."""


class ConfigurationError(ProcRelayException, ValueError):
    """Raised before spawning when run options conflict or are malformed."""


class SpawnError(ProcRelayException):
    """Raised when the operating system refuses to create the process.

    Examples
    --------
    >>> err = SpawnError(["nope", "-x"], FileNotFoundError(2, "No such file"))
    >>> str(err)
    'Could not spawn nope -x: [Errno 2] No such file'
    >>> err.os_error.errno
    2
    """

    def __init__(
        self,
        command: CommandSpec | None = None,
        os_error: OSError | None = None,
        *args: object,
    ) -> None:
        self.command = command
        self.os_error = os_error
        msg = f"Could not spawn {_format_command(command)}"
        if os_error is not None:
            msg += f": {os_error}"
        super().__init__(msg)


class ProcessTimeout(ProcRelayException):
    """Raised when the child did not exit before the configured timeout.

    Examples
    --------
    >>> str(ProcessTimeout(["sleep", "5"], 0.5))
    'Process timed out after 0.5 seconds: sleep 5'
    """

    def __init__(
        self,
        command: CommandSpec | None = None,
        timeout: float | None = None,
        *args: object,
    ) -> None:
        self.command = command
        self.timeout = timeout
        super().__init__(
            f"Process timed out after {timeout} seconds: {_format_command(command)}",
        )


class ConsumerError(ProcRelayException):
    """Raised when a line consumer fails; the original error is ``__cause__``."""

    def __init__(
        self,
        stream: str,
        line: str,
        error: BaseException,
        command: CommandSpec | None = None,
        *args: object,
    ) -> None:
        self.stream = stream
        self.line = line
        self.error = error
        self.command = command
        super().__init__(
            f"{stream} consumer raised {type(error).__name__}: {error} "
            f"(line: {line!r})",
        )


class CommandFailed(ProcRelayException):
    """Raised by :class:`~procrelay.data_cmd.DataCommand` for a non-zero exit.

    Examples
    --------
    >>> err = CommandFailed(["ls", "/nonexistent"], 2, "ls: cannot access")
    >>> str(err)
    'Shell command failed (2): ls /nonexistent => [ls: cannot access]'
    >>> err.output is None
    True
    """

    def __init__(
        self,
        command: CommandSpec,
        exit_code: int,
        error_text: str | None,
        output: list[list[str]] | None = None,
        *args: object,
    ) -> None:
        self.command = command
        self.exit_code = exit_code
        self.error_text = error_text
        self.output = output
        super().__init__(
            f"Shell command failed ({exit_code}): {_format_command(command)} "
            f"=> [{error_text or ''}]",
        )
