"""
Tracer access.

Spans go through the OpenTelemetry API. Until a process installs an SDK
``TracerProvider`` the API hands out non-recording spans, so
instrumented code costs next to nothing when tracing is off.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace

TRACER_NAME = "semantic_search"


def get_tracer(name: str = TRACER_NAME) -> trace.Tracer:
    """Return the tracer for ``name`` from the current global provider."""
    return trace.get_tracer(name)


@contextmanager
def start_span(name: str, attributes: dict[str, Any] | None = None) -> Iterator[trace.Span]:
    """
    Start a span as the current span.

    Exceptions escaping the block are recorded on the span and mark it as
    an error before they propagate.
    """
    with get_tracer().start_as_current_span(
        name,
        attributes=attributes,
        record_exception=True,
        set_status_on_exception=True,
    ) as span:
        yield span
