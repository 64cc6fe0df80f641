"""Internal type annotations.

Notes
-----
:class:`StrPath` and :class:`StrOrBytesPath` are based on `typeshed's`_.

.. _typeshed's: https://github.com/python/typeshed/blob/5ff32f3/stdlib/_typeshed/__init__.pyi#L176-L179
"""  # E501

from __future__ import annotations

import typing as t
from collections.abc import Callable, Sequence

from typing_extensions import TypeAlias

if t.TYPE_CHECKING:
    from os import PathLike

StrPath: TypeAlias = "str | PathLike[str]"
StrOrBytesPath: TypeAlias = "str | bytes | PathLike[str] | PathLike[bytes]"

#: argv sequence, or a single string split or handed to the shell
CommandSpec: TypeAlias = "str | Sequence[StrOrBytesPath]"

#: Called once per line of child output, without the line terminator
StreamConsumer: TypeAlias = Callable[[str], object]

#: Anything :class:`subprocess.Popen` accepts as a stream binding
StreamTarget: TypeAlias = "int | t.IO[t.Any]"

__all__ = [
    "CommandSpec",
    "StrOrBytesPath",
    "StrPath",
    "StreamConsumer",
    "StreamTarget",
]
