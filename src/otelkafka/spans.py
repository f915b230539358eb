"""
Producer and consumer span lifecycle.

Producer spans are named ``"<topic> send"`` and consumer spans
``"<topic> receive"``. Both take the context found in the message
headers as parent and write their own context back into the headers,
so the next hop continues the trace.

Propagator failures never interrupt message flow: the span is created
without a remote parent, or the headers are left without context.
"""

from __future__ import annotations

import logging

from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.trace import Span, SpanKind, Status, StatusCode

from otelkafka.attributes import (
    DESTINATION_KIND_TOPIC,
    MESSAGING_SYSTEM_KAFKA,
    OPERATION_RECEIVE,
)
from otelkafka.carrier import (
    ConsumerMessageCarrier,
    MessageCarrier,
    ProducerMessageCarrier,
    carrier_getter,
    carrier_setter,
)
from otelkafka.config import Config, MessagingSemconv
from otelkafka.types import V0_11_0_0, ConsumerMessage, KafkaVersion, ProducerMessage

logger = logging.getLogger(__name__)


def producer_span_name(topic: str) -> str:
    return f"{topic} send"


def consumer_span_name(topic: str) -> str:
    return f"{topic} receive"


def _extract(config: Config, carrier: MessageCarrier) -> Context | None:
    try:
        return config.propagator.extract(carrier, getter=carrier_getter)
    except Exception as e:
        logger.debug("Failed to extract trace context from message headers: %s", e)
        return None


def _inject(config: Config, span: Span, carrier: MessageCarrier) -> None:
    try:
        config.propagator.inject(
            carrier,
            context=trace.set_span_in_context(span),
            setter=carrier_setter,
        )
    except Exception as e:
        logger.debug("Failed to inject trace context into message headers: %s", e)


def start_producer_span(config: Config, version: KafkaVersion, msg: ProducerMessage) -> Span:
    """
    Start the span covering the production of ``msg``.

    Any context already present in the headers becomes the parent. When the
    client protocol supports headers, the new span's context is written to
    them.

    Args:
        config: Instrumentation configuration
        version: Protocol version of the client
        msg: Outbound message (headers may be modified)

    Returns:
        The started span. Caller MUST end it via :func:`finish_producer_span`.
    """
    semconv = config.semconv
    carrier = ProducerMessageCarrier(msg)
    parent = _extract(config, carrier)

    span = config.tracer.start_span(
        producer_span_name(msg.topic),
        context=parent,
        kind=SpanKind.PRODUCER,
        attributes={
            semconv.system: MESSAGING_SYSTEM_KAFKA,
            semconv.destination_kind: DESTINATION_KIND_TOPIC,
            semconv.destination: msg.topic,
        },
    )

    if version.is_at_least(V0_11_0_0):
        _inject(config, span, carrier)

    return span


def finish_producer_span(
    span: Span,
    partition: int,
    offset: int,
    err: BaseException | None,
    semconv: MessagingSemconv | None = None,
) -> None:
    """
    Record the delivery outcome on a producer span and end it.

    Args:
        span: Span from :func:`start_producer_span`
        partition: Partition reported by the client
        offset: Offset reported by the client
        err: Delivery error, ``None`` on success
        semconv: Attribute keys (defaults to the standard keys)
    """
    semconv = semconv or MessagingSemconv()
    span.set_attributes(
        {
            semconv.message_id: str(offset),
            semconv.partition: partition,
        }
    )
    if err is not None:
        span.set_status(Status(StatusCode.ERROR, str(err)))
        span.record_exception(err)
    span.end()


def start_consumer_span(config: Config, msg: ConsumerMessage) -> Span:
    """
    Start the span covering the delivery of ``msg`` to the application.

    The context found in the headers becomes the parent, and the new span's
    context replaces it so that work started from the message nests under
    the consumer span.

    Returns:
        The started span. Caller MUST call ``span.end()``.
    """
    semconv = config.semconv
    carrier = ConsumerMessageCarrier(msg)
    parent = _extract(config, carrier)

    span = config.tracer.start_span(
        consumer_span_name(msg.topic),
        context=parent,
        kind=SpanKind.CONSUMER,
        attributes={
            semconv.system: MESSAGING_SYSTEM_KAFKA,
            semconv.destination_kind: DESTINATION_KIND_TOPIC,
            semconv.destination: msg.topic,
            semconv.operation: OPERATION_RECEIVE,
            semconv.message_id: str(msg.offset),
            semconv.partition: msg.partition,
        },
    )

    _inject(config, span, carrier)
    return span


__all__ = [
    "producer_span_name",
    "consumer_span_name",
    "start_producer_span",
    "finish_producer_span",
    "start_consumer_span",
]
