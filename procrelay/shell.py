"""Locate executables on a search path.

procrelay.shell
~~~~~~~~~~~~~~~

"""

from __future__ import annotations

import logging
import os
import typing as t

from ._internal.cache import KeyedCache

if t.TYPE_CHECKING:
    from collections.abc import Callable, Iterable

logger = logging.getLogger(__name__)

_executables: KeyedCache[tuple[str, str], str | None] = KeyedCache()


def is_executable(path: str) -> bool:
    """Return True if the current user may execute *path*."""
    return os.access(path, os.X_OK)


def which(
    name: str,
    path: str | Iterable[str] | None = None,
    delim: str = os.pathsep,
    test: Callable[[str], object] | None = None,
) -> str | None:
    """Return the first file called *name* under *path* that passes *test*.

    Unlike :func:`shutil.which`, no suffix such as ``.exe`` is ever appended,
    and the test applied to each existing regular file is configurable.

    Parameters
    ----------
    name : str
        File name, joined onto each directory of the search path.
    path : str or iterable of str, optional
        Search path. A string is split on *delim*. Defaults to ``$PATH``.
    delim : str
        Separator for a string *path*.
    test : callable, optional
        Called with the absolute path of each existing regular file; the
        first truthy result wins. Relative directories resolve against the
        working directory.
        Defaults to :func:`is_executable`.

    Returns
    -------
    str or None
        Absolute path of the matching file, or ``None``.

    Examples
    --------
    >>> which("sh") is not None
    True
    >>> which("sh", path=[]) is None
    True
    """
    if path is None:
        path = os.environ.get("PATH", os.defpath)
    if test is None:
        test = is_executable

    directories = path.split(delim) if isinstance(path, str) else path
    for directory in directories:
        if not directory:
            continue
        candidate = os.path.abspath(os.path.join(directory, name))
        if os.path.isfile(candidate) and test(candidate):
            return candidate
    return None


def find_executable(name: str) -> str | None:
    """Memoised :func:`which` for *name* on the current ``$PATH``.

    Only hits are remembered; a name not found is looked up again next time.
    """
    search_path = os.environ.get("PATH", os.defpath)
    key = (name, search_path)
    found = _executables.get_or_compute(key, lambda: which(name, search_path))
    if found is None:
        _executables.forget(key)
        logger.debug("%s not found on %s", name, search_path)
    return found
