"""
Shared pytest fixtures for the otelkafka tests.

This module provides:
- Tracing fixtures (span_exporter, tracer_provider, propagator, options)
- Metrics fixtures (metric_reader, meter_provider)
- Kafka client settings fixtures (client_config, successes_config)

Tracer providers are created per test and passed to the wrappers through
options, so no test touches the global OpenTelemetry providers.
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable

import pytest
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.sdk.trace.id_generator import IdGenerator
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from otelkafka import (
    ClientConfig,
    Option,
    ProducerSettings,
    with_propagator,
    with_tracer_provider,
)

TOPIC = "test-topic"


class SequentialIdGenerator(IdGenerator):
    """Generates span ids 1, 2, 3, ... and trace ids likewise."""

    def __init__(self) -> None:
        self._span_ids = itertools.count(1)
        self._trace_ids = itertools.count(1)
        self._lock = threading.Lock()

    def generate_span_id(self) -> int:
        with self._lock:
            return next(self._span_ids)

    def generate_trace_id(self) -> int:
        with self._lock:
            return next(self._trace_ids)


# =============================================================================
# Tracing Fixtures
# =============================================================================


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    """
    Provide an in-memory span exporter.

    Returns:
        Exporter collecting every span ended through ``tracer_provider``.
    """
    return InMemorySpanExporter()


@pytest.fixture
def tracer_provider(span_exporter: InMemorySpanExporter) -> TracerProvider:
    """
    Provide a tracer provider with sequential ids exporting to ``span_exporter``.

    Returns:
        A TracerProvider local to the test.
    """
    provider = TracerProvider(id_generator=SequentialIdGenerator())
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return provider


@pytest.fixture
def propagator() -> TraceContextTextMapPropagator:
    """Provide a W3C trace-context propagator."""
    return TraceContextTextMapPropagator()


@pytest.fixture
def options(
    tracer_provider: TracerProvider,
    propagator: TraceContextTextMapPropagator,
) -> list[Option]:
    """Provide instrumentation options bound to the test provider and propagator."""
    return [with_tracer_provider(tracer_provider), with_propagator(propagator)]


@pytest.fixture
def get_spans(span_exporter: InMemorySpanExporter) -> Callable[[], list[ReadableSpan]]:
    """
    Helper fixture to retrieve finished spans in end order.

    Returns:
        Callable that returns the list of finished spans
    """

    def _get_spans() -> list[ReadableSpan]:
        return list(span_exporter.get_finished_spans())

    return _get_spans


# =============================================================================
# Metrics Fixtures
# =============================================================================


@pytest.fixture
def metric_reader() -> InMemoryMetricReader:
    """
    Provide an InMemoryMetricReader for testing metrics.

    Returns:
        InMemoryMetricReader: Reader for inspecting collected metrics.
    """
    return InMemoryMetricReader()


@pytest.fixture
def meter_provider(metric_reader: InMemoryMetricReader) -> MeterProvider:
    """Provide a meter provider reading into ``metric_reader``."""
    return MeterProvider(metric_readers=[metric_reader])


# =============================================================================
# Kafka Client Settings Fixtures
# =============================================================================


@pytest.fixture
def client_config() -> ClientConfig:
    """Provide default client settings (successes not returned)."""
    return ClientConfig()


@pytest.fixture
def successes_config() -> ClientConfig:
    """Provide client settings with success reports enabled."""
    return ClientConfig(producer=ProducerSettings(return_successes=True))
