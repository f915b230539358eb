"""
Producer Tracing Example

This example demonstrates tracing Kafka producers:
- Wrapping a synchronous producer
- Wrapping an asynchronous producer with success reports
- Reading the trace context written to the message headers

The Kafka client is replaced by the in-memory doubles from
``otelkafka.testing``, so no broker is needed. Spans are printed with the
OpenTelemetry SDK console exporter (``pip install otelkafka[dev]``).

Run with: python examples/producer.py
"""

from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from otelkafka import (
    ClientConfig,
    ProducerMessage,
    ProducerMessageCarrier,
    ProducerSettings,
    with_propagator,
    with_tracer_provider,
    wrap_async_producer,
    wrap_sync_producer,
)
from otelkafka.testing import MockAsyncProducer, MockSyncProducer

# =============================================================================
# Step 1: Configure OpenTelemetry
# =============================================================================

provider = TracerProvider()
provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
options = [with_tracer_provider(provider), with_propagator(TraceContextTextMapPropagator())]


def sync_example() -> None:
    print("1. Synchronous producer")
    client = MockSyncProducer()
    client.expect_send_message_and_succeed()

    producer = wrap_sync_producer(None, client, *options)
    msg = ProducerMessage(topic="orders", key=b"order-1", value=b'{"total": 42}')
    partition, offset = producer.send_message(msg)
    producer.close()

    print(f"   Delivered to partition {partition} at offset {offset}")
    print(f"   traceparent: {ProducerMessageCarrier(msg).get('traceparent')}")


def async_example() -> None:
    print("\n2. Asynchronous producer")
    client_config = ClientConfig(producer=ProducerSettings(return_successes=True))
    client = MockAsyncProducer(client_config)
    client.expect_input_and_succeed()
    client.expect_input_and_fail(RuntimeError("leader not available"))

    producer = wrap_async_producer(client_config, client, *options)
    producer.input.put(ProducerMessage(topic="orders", value=b"first", metadata="request-1"))
    producer.input.put(ProducerMessage(topic="orders", value=b"second", metadata="request-2"))
    producer.close()

    for msg in producer.successes:
        print(f"   Acknowledged {msg.metadata} at offset {msg.offset}")
    for error in producer.errors:
        print(f"   Failed {error.msg.metadata}: {error.err}")


if __name__ == "__main__":
    sync_example()
    async_example()
