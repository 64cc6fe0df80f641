"""OpenTelemetry hooks for procrelay.

Spans go to whatever tracer provider the application has configured. Without
:mod:`opentelemetry` installed, or with ``PROCRELAY_OTEL=0``, :func:`start_span`
yields ``None`` and :func:`trace_environment` returns the environment
unchanged.
"""

from __future__ import annotations

import contextlib
import os
import typing as t
from dataclasses import dataclass

from .__about__ import __version__

if t.TYPE_CHECKING:
    from collections.abc import Mapping

propagate = None
trace = None

try:  # pragma: no cover - optional dependency
    from opentelemetry import propagate as otel_propagate, trace as otel_trace
except ImportError:  # pragma: no cover - optional dependency
    pass
else:
    propagate = otel_propagate
    trace = otel_trace


@dataclass(frozen=True)
class TraceHeaders:
    """W3C trace context headers handed to a child process."""

    traceparent: str
    tracestate: str | None = None
    baggage: str | None = None

    def as_environ(self) -> dict[str, str]:
        """Return the headers as child environment variables.

        Examples
        --------
        >>> TraceHeaders("00-abc-def-01").as_environ()
        {'TRACEPARENT': '00-abc-def-01'}
        """
        env = {"TRACEPARENT": self.traceparent}
        if self.tracestate:
            env["TRACESTATE"] = self.tracestate
        if self.baggage:
            env["BAGGAGE"] = self.baggage
        return env


def otel_enabled() -> bool:
    """Return False when ``PROCRELAY_OTEL`` switches tracing off."""
    value = os.environ.get("PROCRELAY_OTEL", "").strip().lower()
    return value not in {"0", "false"}


def current_trace_headers() -> TraceHeaders | None:
    """Return trace headers for the active span, if any."""
    if propagate is None or not otel_enabled():
        return None
    carrier: dict[str, str] = {}
    propagate.inject(carrier)
    traceparent = carrier.get("traceparent")
    if not traceparent:
        return None
    return TraceHeaders(
        traceparent=traceparent,
        tracestate=carrier.get("tracestate"),
        baggage=carrier.get("baggage"),
    )


def trace_environment(
    env: Mapping[str, str] | None,
) -> Mapping[str, str] | None:
    """Return *env* extended with the current trace headers.

    ``None`` (inherit the parent environment) stays ``None`` when there is
    nothing to add.
    """
    headers = current_trace_headers()
    if headers is None:
        return env
    merged = dict(os.environ if env is None else env)
    merged.update(headers.as_environ())
    return merged


@contextlib.contextmanager
def start_span(name: str, **attributes: t.Any) -> t.Iterator[t.Any]:
    """Start a span named *name*, or yield ``None`` when tracing is off.

    Examples
    --------
    >>> with start_span("procrelay.test", command="true"):
    ...     pass
    """
    if trace is None or not otel_enabled():
        yield None
        return
    tracer = trace.get_tracer("procrelay", __version__)
    with tracer.start_as_current_span(name) as span:
        for key, value in attributes.items():
            span.set_attribute(f"procrelay.{key}", value)
        yield span
