"""Tabular data from command output.

procrelay.data_cmd
~~~~~~~~~~~~~~~~~~

:class:`DataCommand` runs a command whose standard output is a table, such
as ``zpool list -H``, and returns the rows split on whitespace. A failed run
becomes a :exc:`~procrelay.exc.CommandFailed` carrying the exit code and the
error text.
"""

from __future__ import annotations

import logging
import typing as t

from . import exc
from .runner import ProcessRunner

if t.TYPE_CHECKING:
    from ._internal.types import CommandSpec, StreamConsumer
    from .runner import RunOptions

logger = logging.getLogger(__name__)

Row = list[str]


def row_collector(rows: list[Row]) -> StreamConsumer:
    """Return a consumer appending each line's whitespace-separated fields."""
    return lambda line: rows.append(line.split())


def line_collector(lines: list[str]) -> StreamConsumer:
    """Return a consumer appending each line verbatim."""
    return lines.append


class DataCommand:
    """Run commands and return their output as rows of fields.

    Examples
    --------
    >>> DataCommand().run(["printf", "tank ONLINE\\nbackup DEGRADED\\n"])
    [['tank', 'ONLINE'], ['backup', 'DEGRADED']]

    No output at all gives ``None``:

    >>> DataCommand().run(["true"]) is None
    True

    >>> DataCommand().run(["true"], ignore_output=True)
    True

    >>> DataCommand().run(["sh", "-c", "exit 1"], ignore_errors=True)
    1
    """

    def __init__(self, runner: ProcessRunner | None = None) -> None:
        self.runner = runner if runner is not None else ProcessRunner()

    def run(
        self,
        command: CommandSpec,
        ignore_errors: bool = False,
        ignore_output: bool = False,
        options: RunOptions | None = None,
    ) -> list[Row] | bool | int | None:
        """Run *command* and interpret its result.

        Parameters
        ----------
        command : str or sequence
            Command to run, see :meth:`ProcessRunner.run`.
        ignore_errors : bool
            Return the exit status for a failed run instead of raising.
            Standard error is discarded.
        ignore_output : bool
            Discard standard output and return ``True`` on success.
        options : RunOptions, optional
            Options for the runner.

        Returns
        -------
        list of rows, bool, int or None
            On exit status 0: ``True`` if *ignore_output*, else the rows, or
            ``None`` when there were none. On failure with *ignore_errors*:
            the exit status.

        Raises
        ------
        :exc:`exc.CommandFailed`
            Non-zero exit status and *ignore_errors* is false.
        """
        rows: list[Row] = []
        errors: list[str] = []

        exit_code = self.runner.run(
            command,
            None if ignore_output else row_collector(rows),
            None if ignore_errors else line_collector(errors),
            options=options,
        )

        if exit_code == 0:
            if ignore_output:
                return True
            return rows or None
        if ignore_errors:
            return exit_code

        error_text = "\n".join(errors).rstrip("\n") if errors else None
        logger.debug("command failed with %d: %s", exit_code, error_text)
        raise exc.CommandFailed(
            command,
            exit_code,
            error_text,
            None if ignore_output or not rows else rows,
        )
