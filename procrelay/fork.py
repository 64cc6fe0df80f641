"""Run a callable in a forked child rooted at a given directory.

procrelay.fork
~~~~~~~~~~~~~~

The parent only learns whether the work succeeded, through the child's exit
status. Nothing the work does to the interpreter, the working directory or
the environment is visible to the caller.
"""

from __future__ import annotations

import logging
import os
import sys
import traceback
import typing as t

from . import exc
from .constants import FORK_FAILURE_STATUS
from .runner import exit_status

if t.TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from ._internal.types import StrPath

logger = logging.getLogger(__name__)


def _system_exit_status(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code & 0xFF
    # sys.exit("message") prints the message and exits with 1
    print(code, file=sys.stderr)
    return 1


def _child(
    directory: StrPath,
    work: Callable[..., object],
    env: Mapping[str, str] | None,
    args: tuple[t.Any, ...],
    kwargs: dict[str, t.Any],
) -> t.NoReturn:
    status = FORK_FAILURE_STATUS
    try:
        os.chdir(directory)
        if env is not None:
            os.environ.update(env)
        work(*args, **kwargs)
    except SystemExit as e:
        status = _system_exit_status(e.code)
    except BaseException:
        traceback.print_exc()
    else:
        status = 0
    finally:
        try:
            sys.stdout.flush()
            sys.stderr.flush()
        finally:
            os._exit(status)


def fork_run(
    directory: StrPath,
    work: Callable[..., object],
    *args: t.Any,
    env: Mapping[str, str] | None = None,
    **kwargs: t.Any,
) -> int:
    """Fork, run ``work(*args, **kwargs)`` in the child under *directory*.

    The parent waits for and reaps the child.

    Parameters
    ----------
    directory : str or PathLike
        Working directory for the child.
    work : callable
        Executed only in the child.
    env : Mapping, optional
        Variables set in the child's environment before *work* runs.

    Returns
    -------
    int
        ``0`` when *work* returned, the requested status when it called
        :func:`sys.exit`, and :data:`~procrelay.constants.FORK_FAILURE_STATUS`
        when it raised (including when *directory* does not exist).

    Raises
    ------
    :exc:`exc.SpawnError`
        The platform has no :func:`os.fork`, or the fork itself failed.

    Examples
    --------
    >>> fork_run("/", lambda: None)
    0
    >>> fork_run("/", lambda: 1 / 0)  # doctest: +SKIP
    255
    """
    if not hasattr(os, "fork"):
        raise exc.SpawnError(
            getattr(work, "__name__", repr(work)),
            OSError(f"os.fork is not available on {sys.platform}"),
        )

    # unflushed parent output would otherwise be written twice
    sys.stdout.flush()
    sys.stderr.flush()

    try:
        pid = os.fork()
    except OSError as e:
        logger.exception("fork failed for %r", work)
        raise exc.SpawnError(getattr(work, "__name__", repr(work)), e) from e

    if pid == 0:
        _child(directory, work, env, args, kwargs)

    _, wait_status = os.waitpid(pid, 0)
    status = exit_status(os.waitstatus_to_exitcode(wait_status))
    logger.debug("forked child %s in %s exited with status %d", pid, directory, status)
    return status
