"""Defaults for procrelay, configurable through the environment."""

from __future__ import annotations

import locale
import os

#: Exit status reported by :func:`~procrelay.fork.fork_run` when the work raised
FORK_FAILURE_STATUS = 255

#: Offset added to a signal number when a child was killed by that signal
SIGNAL_EXIT_OFFSET = 128

#: Default timeout for a run, in seconds. Unset means no timeout.
#: Can be configured via :envvar:`PROCRELAY_TIMEOUT_SECONDS`
DEFAULT_TIMEOUT_SECONDS: float | None = (
    float(os.environ["PROCRELAY_TIMEOUT_SECONDS"])
    if os.getenv("PROCRELAY_TIMEOUT_SECONDS")
    else None
)

#: Text encoding for decoding child output.
#: Can be configured via :envvar:`PROCRELAY_ENCODING`
DEFAULT_ENCODING = os.getenv("PROCRELAY_ENCODING") or locale.getpreferredencoding(
    False,
)

#: Error handler for undecodable bytes in child output
DEFAULT_ERRORS = "backslashreplace"
