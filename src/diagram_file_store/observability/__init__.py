"""Observability module for OpenTelemetry-aligned tracing and logging."""

from diagram_file_store.observability.bootstrap import init_observability
from diagram_file_store.observability.context import get_trace_context, set_trace_context, trace_context
from diagram_file_store.observability.logging import JsonFormatter, configure_logging
from diagram_file_store.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_trace_context",
    "get_tracer",
    "init_observability",
    "init_tracing",
    "set_trace_context",
    "trace_context",
]
