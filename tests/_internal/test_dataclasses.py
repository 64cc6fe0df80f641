"""Test dataclasses utilities."""

from __future__ import annotations

import dataclasses
import typing as t

from procrelay._internal.dataclasses import SkipDefaultFieldsReprMixin
from procrelay.runner import RunOptions, StdinPolicy


@dataclasses.dataclass(repr=False)
class Binding(SkipDefaultFieldsReprMixin):
    """Test class for SkipDefaultFieldsReprMixin."""

    stream: str
    target: t.Optional[int] = None
    extra: dict[str, t.Any] = dataclasses.field(default_factory=dict)


def test_skip_default_fields_repr() -> None:
    """Test SkipDefaultFieldsReprMixin repr behavior."""
    assert repr(Binding("stdout")) == "Binding(stream=stdout)"
    assert repr(Binding("stdout", target=1)) == "Binding(stream=stdout, target=1)"

    binding = Binding("stderr")
    binding.extra["close"] = True
    assert repr(binding) == "Binding(stream=stderr, extra={'close': True})"


def test_run_options_repr() -> None:
    """RunOptions only shows what differs from the defaults."""
    options = RunOptions(stdin=StdinPolicy.INHERIT, spawn_options={"cwd": "/"})
    assert repr(options) == (
        "RunOptions(stdin=StdinPolicy.INHERIT, spawn_options={'cwd': '/'})"
    )
