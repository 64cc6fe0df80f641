""":mod:`dataclasses` utilities.

Note
----
This is an internal API not covered by versioning policy.
"""

import dataclasses
import typing as t
from operator import attrgetter

if t.TYPE_CHECKING:
    from _typeshed import DataclassInstance


class SkipDefaultFieldsReprMixin:
    r"""Skip default fields in :func:`~dataclasses.dataclass` object representation.

    Fields built with a ``default_factory`` are skipped while they compare equal
    to a fresh value from that factory.

    Examples
    --------
    >>> @dataclasses.dataclass(repr=False)
    ... class Binding(SkipDefaultFieldsReprMixin):
    ...     stream: str
    ...     target: t.Optional[int] = None
    ...     extra: dict = dataclasses.field(default_factory=dict)
    ...

    >>> Binding('stdout')
    Binding(stream=stdout)

    >>> Binding('stderr', target=2)
    Binding(stream=stderr, target=2)

    >>> Binding('stdin', extra={'close': True})
    Binding(stream=stdin, extra={'close': True})
    """

    def __repr__(self: "DataclassInstance") -> str:
        """Omit default fields in object representation."""

        def is_default(f: "dataclasses.Field[t.Any]") -> bool:
            value = attrgetter(f.name)(self)
            if f.default is not dataclasses.MISSING:
                return bool(value == f.default)
            if f.default_factory is not dataclasses.MISSING:
                return bool(value == f.default_factory())
            return False

        nodef_f_vals = (
            (f.name, attrgetter(f.name)(self))
            for f in dataclasses.fields(self)
            if f.repr and not is_default(f)
        )

        nodef_f_repr = ", ".join(f"{name}={value}" for name, value in nodef_f_vals)
        return f"{self.__class__.__name__}({nodef_f_repr})"
