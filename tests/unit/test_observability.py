"""Unit tests for observability module."""

import json
import logging
from pathlib import Path
import sys

from opentelemetry import trace as trace_api
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode
import pytest

from diagram_file_store.adapters.diagram_store import DiagramFileStore
from diagram_file_store.config import Settings
from diagram_file_store.domain import Identity, NotFoundError
from diagram_file_store.observability import (
    JsonFormatter,
    configure_logging,
    create_span,
    get_trace_context,
    init_observability,
    init_tracing,
    set_trace_context,
)


def _record(msg: str = "test message", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="diagram_file_store.adapters.diagram_store",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    exporter = InMemorySpanExporter()
    provider = trace_api.get_tracer_provider()
    if not isinstance(provider, TracerProvider):
        provider = init_tracing("test-service")
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    return exporter


@pytest.mark.unit
class TestJsonFormatter:
    """Tests for structured JSON logging."""

    def test_format_includes_trace_context(self):
        set_trace_context("a" * 32, "b" * 16, solution_root="/solutions/orders")

        data = json.loads(JsonFormatter().format(_record()))

        assert data["message"] == "test message"
        assert data["level"] == "INFO"
        assert data["trace_id"] == "a" * 32
        assert data["span_id"] == "b" * 16
        assert data["solution_root"] == "/solutions/orders"
        assert data["component"] == "diagram_store"

    def test_format_redacts_identity_and_truncates(self):
        record = _record("x" * 5000)
        record.identity = Identity(token="secret")
        record.diagram = Path("/solutions/a.bpmn")

        data = json.loads(JsonFormatter().format(record))

        assert data["message"].endswith("...")
        assert data["identity"] == "[REDACTED]"
        assert data["diagram"] == "/solutions/a.bpmn"

    def test_format_includes_exception(self):
        try:
            raise NotFoundError("'/missing' does not exist.")
        except NotFoundError:
            record = _record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(record))

        assert "NotFoundError" in data["exception"]

    def test_get_trace_context_generates_ids(self):
        ctx = get_trace_context()

        assert len(ctx["trace_id"]) == 32
        assert len(ctx["span_id"]) == 16


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for root logger configuration."""

    def test_configure_logging_sets_level(self):
        configure_logging(level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG

    def test_configure_logging_replaces_handlers(self):
        configure_logging(level="INFO")
        configure_logging(level="INFO")

        assert len(logging.getLogger().handlers) == 1
        assert isinstance(logging.getLogger().handlers[0].formatter, JsonFormatter)

    def test_configure_logging_plain_text(self):
        configure_logging(level="INFO", json_output=False)

        formatter = logging.getLogger().handlers[0].formatter
        assert "%(asctime)s" in formatter._style._fmt

    def test_configure_logging_logger_overrides(self):
        configure_logging(level="INFO", logger_levels={"diagram_file_store.adapters": "ERROR"})

        assert logging.getLogger("diagram_file_store.adapters").level == logging.ERROR


@pytest.mark.unit
class TestTracing:
    """Tests for spans around store operations."""

    def test_create_span_records_failure(self, span_exporter: InMemorySpanExporter):
        with pytest.raises(RuntimeError), create_span("test.operation", attributes={"test.key": "value"}):
            raise RuntimeError("boom")

        span = next(s for s in span_exporter.get_finished_spans() if s.name == "test.operation")
        assert span.status.status_code == StatusCode.ERROR
        assert span.attributes["test.key"] == "value"

    def test_create_span_exposes_ids_to_logging(self, span_exporter: InMemorySpanExporter):
        with create_span("test.ids") as span:
            expected = format(span.get_span_context().span_id, "016x")
            assert get_trace_context()["span_id"] == expected

    @pytest.mark.asyncio
    async def test_store_operations_are_traced(
        self, span_exporter: InMemorySpanExporter, solution_dir: Path, trash_dir: Path
    ):
        store = DiagramFileStore(trash_dir)
        await store.open_path(solution_dir)
        await store.get_diagrams()
        with pytest.raises(NotFoundError):
            await store.get_diagram_by_name("missing")

        spans = {span.name: span for span in span_exporter.get_finished_spans()}
        assert "diagram_store.open_path" in spans
        assert spans["diagram_store.get_diagrams"].attributes["diagram_store.diagram_count"] == 0
        assert spans["diagram_store.get_diagram_by_name"].status.status_code == StatusCode.ERROR


@pytest.mark.unit
class TestInitObservability:
    """Tests for wiring settings into logging and tracing."""

    def test_applies_explicit_settings(self, tmp_path: Path):
        settings = Settings(trash_dir=tmp_path, log_level="debug", log_json=False, service_name="studio")

        provider = init_observability(settings, logger_levels={"diagram_file_store.adapters": "WARNING"})

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)
        assert logging.getLogger("diagram_file_store.adapters").level == logging.WARNING
        assert provider is trace_api.get_tracer_provider()

    def test_reads_settings_from_environment(self, monkeypatch, tmp_path: Path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DIAGRAM_STORE_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("DIAGRAM_STORE_LOG_JSON", "true")

        init_observability()

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
