"""Serialised changes of the process working directory.

procrelay.cwd
~~~~~~~~~~~~~

The working directory is shared by every thread in the process. Code that
changes it goes through :func:`pushd`, which holds one process-wide lock for
the whole time the directory is changed.
"""

from __future__ import annotations

import contextlib
import logging
import os
import pathlib
import runpy
import threading
import typing as t

if t.TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from ._internal.types import StrPath

logger = logging.getLogger(__name__)

#: Held while the working directory differs from the one a caller started in
CWD_LOCK = threading.RLock()


@contextlib.contextmanager
def pushd(directory: StrPath) -> Iterator[pathlib.Path]:
    """Change into *directory* for the extent of the block.

    The previous directory is restored however the block exits. Nested use in
    one thread is allowed; other threads block until the outermost block
    exits.

    Examples
    --------
    >>> before = os.getcwd()
    >>> with pushd("/") as here:
    ...     os.getcwd() == str(here)
    True
    >>> os.getcwd() == before
    True
    """
    with CWD_LOCK:
        previous = os.getcwd()
        os.chdir(directory)
        logger.debug("pushd %s (from %s)", directory, previous)
        try:
            yield pathlib.Path.cwd()
        finally:
            os.chdir(previous)
            logger.debug("popd %s", previous)


def evaluate_file(
    path: StrPath,
    init_globals: Mapping[str, t.Any] | None = None,
) -> dict[str, t.Any]:
    """Run the Python file at *path* from its own directory.

    Relative paths opened by the file resolve against the file's directory.

    Parameters
    ----------
    path : str or PathLike
        Python source file.
    init_globals : Mapping, optional
        Pre-populated module globals.

    Returns
    -------
    dict
        The module globals after execution.
    """
    source = pathlib.Path(path).resolve()
    with pushd(source.parent):
        return runpy.run_path(
            str(source),
            init_globals=dict(init_globals) if init_globals is not None else None,
        )
