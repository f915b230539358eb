"""
Consumer Tracing Example

This example demonstrates continuing a producer's trace on the consumer side:
- Producing a message with an instrumented producer
- Consuming it through an instrumented partition consumer
- Starting application work under the consumer span

Run with: python examples/consumer.py
"""

from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from otelkafka import (
    ConsumerMessage,
    ConsumerMessageCarrier,
    ProducerMessage,
    with_propagator,
    with_tracer_provider,
    wrap_consumer,
    wrap_sync_producer,
)
from otelkafka.carrier import carrier_getter
from otelkafka.testing import MockConsumer, MockSyncProducer

provider = TracerProvider()
provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
propagator = TraceContextTextMapPropagator()
options = [with_tracer_provider(provider), with_propagator(propagator)]


def main() -> None:
    # Produce
    client_producer = MockSyncProducer()
    client_producer.expect_send_message_and_succeed()
    producer = wrap_sync_producer(None, client_producer, *options)
    produced = ProducerMessage(topic="orders", value=b"order-1")
    producer.send_message(produced)

    # Consume
    client_consumer = MockConsumer()
    client_partition = client_consumer.expect_consume_partition("orders", 0, 0)
    consumer = wrap_consumer(client_consumer, *options)
    partition_consumer = consumer.consume_partition("orders", 0, 0)

    client_partition.yield_message(ConsumerMessage(value=produced.value, headers=list(produced.headers)))
    client_partition.close()

    tracer = provider.get_tracer("orders-service")
    for msg in partition_consumer.messages:
        ctx = propagator.extract(ConsumerMessageCarrier(msg), getter=carrier_getter)
        with tracer.start_as_current_span("process order", context=ctx):
            print(f"Processing {msg.value!r} from {msg.topic}/{msg.partition}@{msg.offset}")

    consumer.close()


if __name__ == "__main__":
    main()
