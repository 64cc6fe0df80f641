"""Run external commands, relaying their output one line at a time.

procrelay.runner
~~~~~~~~~~~~~~~~

:func:`run` spawns a command, waits for it to exit, hands every line of its
standard output to one callable and every line of its standard error to
another, and returns the exit status.

Examples
--------
>>> lines = []
>>> run(["echo", "true"], lines.append)
0
>>> lines
['true']

Output lines are always delivered before error lines:

>>> tagged = []
>>> run(
...     ["ls", "-d", "/etc", "/nonexistent"],
...     lambda line: tagged.append(("out", line)),
...     lambda line: tagged.append(("err", line)),
... )
2
>>> tagged[0]
('out', '/etc')
>>> tagged[1][0], "No such file or directory" in tagged[1][1]
('err', True)

A non-zero exit status is returned, not raised:

>>> run(["sh", "-c", "exit 3"])
3
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import os
import shlex
import subprocess
import time
import typing as t

from . import exc
from ._internal.dataclasses import SkipDefaultFieldsReprMixin
from .constants import (
    DEFAULT_ENCODING,
    DEFAULT_ERRORS,
    DEFAULT_TIMEOUT_SECONDS,
    SIGNAL_EXIT_OFFSET,
)
from .otel import start_span, trace_environment

if t.TYPE_CHECKING:
    from collections.abc import Mapping

    from typing_extensions import Self

    from ._internal.types import CommandSpec, StreamConsumer, StreamTarget

logger = logging.getLogger(__name__)

#: :class:`subprocess.Popen` keywords the runner sets itself
RESERVED_SPAWN_OPTIONS = frozenset(
    {
        "args",
        "stdin",
        "stdout",
        "stderr",
        "text",
        "universal_newlines",
        "encoding",
        "errors",
        "shell",
    },
)


class StdinPolicy(enum.Enum):
    """How the child's standard input is bound when no file is given."""

    #: Bind to the null device; the child reads end-of-file immediately
    CLOSED = "closed"
    #: Share the parent's standard input
    INHERIT = "inherit"


@dataclasses.dataclass(frozen=True, repr=False)
class RunOptions(SkipDefaultFieldsReprMixin):
    """Options for a single :func:`run`.

    Attributes
    ----------
    timeout : float, optional
        Seconds allowed for spawning and waiting on the child, as one deadline.
    stdin : StdinPolicy or file
        :attr:`StdinPolicy.CLOSED`, :attr:`StdinPolicy.INHERIT`, or a file
        object / descriptor used verbatim.
    stdout : file, optional
        Explicit destination for standard output. Cannot be combined with an
        output consumer.
    stderr : file, optional
        Explicit destination for standard error, :data:`subprocess.STDOUT`
        included. Cannot be combined with an error consumer.
    encoding : str
        Encoding used to decode the child's output.
    errors : str
        Error handler used while decoding.
    shell : bool
        Hand a string command to the shell instead of splitting it.
    spawn_options : Mapping
        Passed through to :class:`subprocess.Popen`, e.g. ``cwd`` or ``env``.

    Examples
    --------
    >>> RunOptions(timeout=2.5)
    RunOptions(timeout=2.5)
    >>> RunOptions().replace(spawn_options={"cwd": "/tmp"})
    RunOptions(spawn_options={'cwd': '/tmp'})
    """

    timeout: float | None = DEFAULT_TIMEOUT_SECONDS
    stdin: StdinPolicy | StreamTarget = StdinPolicy.CLOSED
    stdout: StreamTarget | None = None
    stderr: StreamTarget | None = None
    encoding: str = DEFAULT_ENCODING
    errors: str = DEFAULT_ERRORS
    shell: bool = False
    spawn_options: Mapping[str, t.Any] = dataclasses.field(default_factory=dict)

    def replace(self, **changes: t.Any) -> Self:
        """Return a copy with *changes* applied.

        Raises
        ------
        :exc:`exc.ConfigurationError`
            Unknown option name.
        """
        try:
            return dataclasses.replace(self, **changes)
        except TypeError as e:
            raise exc.ConfigurationError(str(e)) from e


def exit_status(returncode: int) -> int:
    """Map a :attr:`subprocess.Popen.returncode` onto a non-negative status.

    A child killed by signal ``N`` reports ``-N``; it is mapped to ``128 + N``.

    Examples
    --------
    >>> exit_status(0), exit_status(2), exit_status(-9)
    (0, 2, 137)
    """
    if returncode < 0:
        return SIGNAL_EXIT_OFFSET - returncode
    return returncode


def split_lines(text: str | None) -> list[str]:
    r"""Split decoded output into lines without terminators.

    Only ``\n`` ends a line. A ``\r`` directly before it is part of the
    terminator; any other ``\r`` stays in the line.

    Examples
    --------
    >>> split_lines("a\nb\n")
    ['a', 'b']
    >>> split_lines("a\n\nb")
    ['a', '', 'b']
    >>> split_lines("a\r\nb\r\n")
    ['a', 'b']
    >>> split_lines("50%\r100%\n")
    ['50%\r100%']
    >>> split_lines("")
    []
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _decode(data: bytes | None, encoding: str, errors: str) -> str | None:
    if data is None:
        return None
    return data.decode(encoding, errors)


def _read_available(stream: t.IO[bytes] | None) -> bytes:
    """Read whatever is already buffered in *stream* without blocking."""
    if stream is None or stream.closed:
        return b""
    fd = stream.fileno()
    os.set_blocking(fd, False)
    chunks = []
    while True:
        try:
            chunk = os.read(fd, 32768)
        except BlockingIOError:
            break
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def format_command(command: CommandSpec) -> str:
    """Return *command* as a single printable command line.

    Examples
    --------
    >>> format_command(["echo", "hello world"])
    'echo "hello world"'
    >>> format_command("ls -l")
    'ls -l'
    """
    if isinstance(command, (str, bytes)):
        return os.fsdecode(command)
    return subprocess.list2cmdline([os.fsdecode(arg) for arg in command])


def _normalize_command(
    command: CommandSpec,
    shell: bool,
) -> str | list[t.Any]:
    if isinstance(command, (str, bytes)):
        command_str = os.fsdecode(command)
        if not command_str.strip():
            msg = "Command must not be empty"
            raise exc.ConfigurationError(msg)
        if "\0" in command_str:
            msg = f"Command contains a null byte: {command_str!r}"
            raise exc.ConfigurationError(msg)
        return command_str if shell else shlex.split(command_str)

    argv = list(command)
    if not argv:
        msg = "Command must not be empty"
        raise exc.ConfigurationError(msg)
    for arg in argv:
        if "\0" in os.fsdecode(arg):
            msg = f"Command argument contains a null byte: {arg!r}"
            raise exc.ConfigurationError(msg)
    return argv


def _resolve_stream(
    name: str,
    consumer: StreamConsumer | None,
    destination: StreamTarget | None,
) -> StreamTarget:
    if consumer is not None:
        if not callable(consumer):
            msg = f"{name} consumer is not callable: {consumer!r}"
            raise exc.ConfigurationError(msg)
        if destination is not None:
            msg = f"Both a {name} consumer and a {name} destination provided"
            raise exc.ConfigurationError(msg)
        return subprocess.PIPE
    if destination is None:
        return subprocess.DEVNULL
    if destination == subprocess.PIPE:
        msg = f"Use a {name} consumer to read {name} through a pipe"
        raise exc.ConfigurationError(msg)
    return destination


def _resolve_stdin(stdin: StdinPolicy | StreamTarget) -> StreamTarget | None:
    if stdin is StdinPolicy.CLOSED:
        return subprocess.DEVNULL
    if stdin is StdinPolicy.INHERIT:
        return None
    return stdin


def _drain(
    stream: str,
    text: str | None,
    consumer: StreamConsumer | None,
    command: CommandSpec,
) -> None:
    if consumer is None:
        return
    lines = split_lines(text)
    logger.debug("delivering %d %s lines", len(lines), stream)
    for line in lines:
        try:
            consumer(line)
        except Exception as e:
            raise exc.ConsumerError(stream, line, e, command) from e


class ProcessRunner:
    """Spawn commands with a set of default :class:`RunOptions`.

    Examples
    --------
    >>> runner = ProcessRunner().with_options(timeout=10)
    >>> runner.options
    RunOptions(timeout=10)
    >>> out = []
    >>> runner.run("echo one two", out.append)
    0
    >>> out
    ['one two']
    """

    def __init__(self, options: RunOptions | None = None) -> None:
        self.options = options if options is not None else RunOptions()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.options!r})"

    def with_options(self, **changes: t.Any) -> Self:
        """Return a runner whose default options have *changes* applied."""
        return type(self)(self.options.replace(**changes))

    def run(
        self,
        command: CommandSpec,
        out_consumer: StreamConsumer | None = None,
        err_consumer: StreamConsumer | None = None,
        options: RunOptions | None = None,
        **changes: t.Any,
    ) -> int:
        """Run *command* to completion and return its exit status.

        Parameters
        ----------
        command : str or sequence
            argv, or a string split with :func:`shlex.split` (handed to the
            shell verbatim when ``shell=True``).
        out_consumer : callable, optional
            Called with each line of standard output.
        err_consumer : callable, optional
            Called with each line of standard error, after every output line.
        options : RunOptions, optional
            Replaces the runner's default options for this call.
        **changes :
            Applied on top of the options, e.g. ``timeout=5``.

        Returns
        -------
        int
            Exit status of the child. Non-zero is not treated as an error.

        Raises
        ------
        :exc:`exc.ConfigurationError`
            Conflicting or malformed options. Nothing was spawned.
        :exc:`exc.SpawnError`
            The operating system could not start the command.
        :exc:`exc.ProcessTimeout`
            The child was still running at the deadline. It has been killed
            and reaped. A child that exited while a descendant keeps its
            pipes open is not a timeout: the output read by the deadline is
            delivered and its status returned.
        :exc:`exc.ConsumerError`
            A consumer raised. The child has been reaped and all pipes closed.
        """
        opts = self.options if options is None else options
        if changes:
            opts = opts.replace(**changes)

        argv = _normalize_command(command, opts.shell)
        stdout = _resolve_stream("stdout", out_consumer, opts.stdout)
        stderr = _resolve_stream("stderr", err_consumer, opts.stderr)
        stdin = _resolve_stdin(opts.stdin)

        reserved = RESERVED_SPAWN_OPTIONS.intersection(opts.spawn_options)
        if reserved:
            msg = f"Spawn options managed by the runner: {', '.join(sorted(reserved))}"
            raise exc.ConfigurationError(msg)
        if opts.timeout is not None and opts.timeout < 0:
            msg = f"Timeout must not be negative: {opts.timeout}"
            raise exc.ConfigurationError(msg)

        spawn_options = dict(opts.spawn_options)
        cmdline = format_command(command)

        with start_span("procrelay.run", command=cmdline) as span:
            spawn_options["env"] = trace_environment(spawn_options.get("env"))
            deadline = (
                None if opts.timeout is None else time.monotonic() + opts.timeout
            )

            logger.debug("spawning %s", cmdline)
            try:
                process = subprocess.Popen(
                    argv,
                    stdin=stdin,
                    stdout=stdout,
                    stderr=stderr,
                    shell=opts.shell,
                    **spawn_options,
                )
            except OSError as e:
                logger.exception("Exception for %s", cmdline)
                raise exc.SpawnError(command, e) from e

            with process:
                try:
                    out_data, err_data = process.communicate(
                        timeout=(
                            None
                            if deadline is None
                            else max(0.0, deadline - time.monotonic())
                        ),
                    )
                except subprocess.TimeoutExpired as e:
                    if process.poll() is None:
                        process.kill()
                        process.wait()
                        logger.debug(
                            "%s timed out after %s seconds, killed pid %s",
                            cmdline,
                            opts.timeout,
                            process.pid,
                        )
                        raise exc.ProcessTimeout(command, opts.timeout) from None
                    pipes = (process.stdout, process.stderr)
                    if all(pipe is None or pipe.closed for pipe in pipes):
                        # exited between the final wait and poll(); nothing blocks
                        out_data, err_data = process.communicate()
                    else:
                        # the child exited; a descendant still holds its pipes
                        logger.debug(
                            "%s exited, pipes still open after %s seconds",
                            cmdline,
                            opts.timeout,
                        )
                        out_data = (e.output or b"") + _read_available(
                            process.stdout,
                        )
                        err_data = (e.stderr or b"") + _read_available(
                            process.stderr,
                        )

                status = exit_status(process.returncode)
                logger.debug("%s exited with status %d", cmdline, status)
                if span is not None:
                    span.set_attribute("procrelay.exit_status", status)

                out_text = _decode(out_data, opts.encoding, opts.errors)
                err_text = _decode(err_data, opts.encoding, opts.errors)
                _drain("stdout", out_text, out_consumer, command)
                _drain("stderr", err_text, err_consumer, command)

        return status


_default_runner = ProcessRunner()


def run(
    command: CommandSpec,
    out_consumer: StreamConsumer | None = None,
    err_consumer: StreamConsumer | None = None,
    options: RunOptions | None = None,
    **changes: t.Any,
) -> int:
    """Run *command* with the default runner. See :meth:`ProcessRunner.run`."""
    return _default_runner.run(
        command,
        out_consumer,
        err_consumer,
        options=options,
        **changes,
    )
