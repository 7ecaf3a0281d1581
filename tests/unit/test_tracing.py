"""Tests for tracing support."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from fabric_orderer_operator import tracing


class TestTraceSpan:
    """Test cases for trace_span."""

    def test_no_tracer(self):
        with patch.object(tracing, "_tracer", None):
            with tracing.trace_span("reconcile_orderer") as span:
                assert span is None

    def test_span_attributes(self):
        tracer = MagicMock()
        with patch.object(tracing, "_tracer", tracer):
            with tracing.trace_span("reconcile_orderer", kind="Orderer", attributes={"orderer.name": "orderer0"}):
                pass

        tracer.start_as_current_span.assert_called_once_with(
            "reconcile_orderer",
            attributes={"orderer.name": "orderer0", "resource.kind": "Orderer"},
        )

    def test_exception_propagates(self):
        tracer = MagicMock()
        with patch.object(tracing, "_tracer", tracer):
            with pytest.raises(RuntimeError):
                with tracing.trace_span("reconcile_orderer"):
                    raise RuntimeError("boom")


class TestInitializeTracing:
    """Test cases for initialize_tracing."""

    def test_disabled(self, monkeypatch):
        monkeypatch.setenv("OTEL_TRACES_ENABLED", "false")
        with patch.object(tracing, "_tracer", None):
            tracing.initialize_tracing()
            assert tracing.get_tracer() is None

    def test_enabled(self, monkeypatch):
        monkeypatch.setenv("OTEL_TRACES_ENABLED", "true")
        monkeypatch.delenv("OTEL_EXPORTER_OTLP_ENDPOINT", raising=False)
        monkeypatch.delenv("OTEL_SERVICE_NAME", raising=False)
        with patch.object(tracing, "_tracer", None), \
                patch.object(tracing, "OTLPSpanExporter") as mock_exporter, \
                patch.object(tracing, "BatchSpanProcessor"), \
                patch.object(tracing.trace, "set_tracer_provider") as mock_set_provider:
            tracing.initialize_tracing()
            assert tracing.get_tracer() is not None

        mock_exporter.assert_called_once_with(endpoint="http://localhost:4317")
        mock_set_provider.assert_called_once()
