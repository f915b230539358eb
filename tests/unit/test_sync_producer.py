"""
Unit tests for the instrumented synchronous producer.

Tests for:
- One producer span per sent message, with delivery attributes
- Header injection
- Batch sends sharing the batch error
- Pass-through of results, exceptions and unknown attributes
"""

from __future__ import annotations

from collections.abc import Callable

import pytest
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.trace import SpanKind, StatusCode

from otelkafka import (
    V0_10_2_0,
    ClientConfig,
    Option,
    ProducerMessage,
    ProducerMessageCarrier,
    SyncProducer,
    wrap_sync_producer,
)
from otelkafka.testing import MockExpectationError, MockSyncProducer

TOPIC = "test-topic"


@pytest.fixture
def mock_producer() -> MockSyncProducer:
    return MockSyncProducer()


class TestSendMessage:
    """Tests for SyncProducer.send_message."""

    def test_single_message_span(
        self,
        mock_producer: MockSyncProducer,
        options: list[Option],
        get_spans: Callable[[], list[ReadableSpan]],
    ) -> None:
        """A successful send produces one span with the acknowledged position."""
        mock_producer.expect_send_message_and_succeed()
        producer = wrap_sync_producer(None, mock_producer, *options)
        msg = ProducerMessage(topic=TOPIC, key=b"foo", value=b"bar")

        partition, offset = producer.send_message(msg)

        assert (partition, offset) == (0, 1)
        (span,) = get_spans()
        assert span.name == "test-topic send"
        assert span.kind == SpanKind.PRODUCER
        assert span.attributes["messaging.message_id"] == "1"
        assert span.attributes["messaging.kafka.partition"] == 0
        assert span.status.status_code == StatusCode.UNSET

        ctx = span.context
        expected = f"00-{ctx.trace_id:032x}-{ctx.span_id:016x}-01"
        assert ProducerMessageCarrier(msg).get("traceparent") == expected

    def test_offsets_advance(
        self,
        mock_producer: MockSyncProducer,
        options: list[Option],
        get_spans: Callable[[], list[ReadableSpan]],
    ) -> None:
        """Each span records its own message's offset."""
        for _ in range(3):
            mock_producer.expect_send_message_and_succeed()
        producer = wrap_sync_producer(None, mock_producer, *options)

        for _ in range(3):
            producer.send_message(ProducerMessage(topic=TOPIC))

        assert [span.attributes["messaging.message_id"] for span in get_spans()] == ["1", "2", "3"]

    def test_error_is_reraised_and_recorded(
        self,
        mock_producer: MockSyncProducer,
        options: list[Option],
        get_spans: Callable[[], list[ReadableSpan]],
    ) -> None:
        """A failed send raises the client error and marks the span."""
        mock_producer.expect_send_message_and_fail(RuntimeError("boom"))
        producer = wrap_sync_producer(None, mock_producer, *options)

        with pytest.raises(RuntimeError, match="boom"):
            producer.send_message(ProducerMessage(topic=TOPIC))

        (span,) = get_spans()
        assert span.status.status_code == StatusCode.ERROR
        assert span.status.description == "boom"

    def test_unexpected_send_propagates(
        self,
        mock_producer: MockSyncProducer,
        options: list[Option],
        get_spans: Callable[[], list[ReadableSpan]],
    ) -> None:
        """Errors of the wrapped producer are not swallowed."""
        producer = wrap_sync_producer(None, mock_producer, *options)

        with pytest.raises(MockExpectationError):
            producer.send_message(ProducerMessage(topic=TOPIC))
        assert len(get_spans()) == 1

    def test_old_protocol_gets_no_headers(
        self,
        mock_producer: MockSyncProducer,
        options: list[Option],
        get_spans: Callable[[], list[ReadableSpan]],
    ) -> None:
        """Pre-0.11 clients are traced but their messages keep no headers."""
        mock_producer.expect_send_message_and_succeed()
        producer = wrap_sync_producer(ClientConfig(version=V0_10_2_0), mock_producer, *options)
        msg = ProducerMessage(topic=TOPIC)

        producer.send_message(msg)

        assert msg.headers == []
        assert len(get_spans()) == 1


class TestSendMessages:
    """Tests for SyncProducer.send_messages."""

    def test_one_span_per_message(
        self,
        mock_producer: MockSyncProducer,
        options: list[Option],
        get_spans: Callable[[], list[ReadableSpan]],
    ) -> None:
        """A batch yields one span per message, in order."""
        mock_producer.expect_send_message_and_succeed()
        mock_producer.expect_send_message_and_succeed()
        producer = wrap_sync_producer(None, mock_producer, *options)
        msgs = [ProducerMessage(topic=TOPIC), ProducerMessage(topic="other-topic")]

        producer.send_messages(msgs)

        spans = get_spans()
        assert [span.name for span in spans] == ["test-topic send", "other-topic send"]
        assert [span.attributes["messaging.message_id"] for span in spans] == ["1", "2"]
        assert all(span.status.status_code == StatusCode.UNSET for span in spans)

    def test_batch_error_applies_to_every_span(
        self,
        mock_producer: MockSyncProducer,
        options: list[Option],
        get_spans: Callable[[], list[ReadableSpan]],
    ) -> None:
        """When the batch fails, every span of the batch is marked failed."""
        mock_producer.expect_send_message_and_succeed()
        mock_producer.expect_send_message_and_fail(RuntimeError("boom"))
        producer = wrap_sync_producer(None, mock_producer, *options)

        with pytest.raises(RuntimeError, match="boom"):
            producer.send_messages([ProducerMessage(topic=TOPIC), ProducerMessage(topic=TOPIC)])

        spans = get_spans()
        assert len(spans) == 2
        for span in spans:
            assert span.status.status_code == StatusCode.ERROR
            assert span.status.description == "boom"

    def test_every_message_gets_headers(
        self,
        mock_producer: MockSyncProducer,
        options: list[Option],
    ) -> None:
        """Each message in a batch carries its own span context."""
        mock_producer.expect_send_message_and_succeed()
        mock_producer.expect_send_message_and_succeed()
        producer = wrap_sync_producer(None, mock_producer, *options)
        msgs = [ProducerMessage(topic=TOPIC), ProducerMessage(topic=TOPIC)]

        producer.send_messages(msgs)

        values = {ProducerMessageCarrier(msg).get("traceparent") for msg in msgs}
        assert len(values) == 2
        assert "" not in values


class TestDelegation:
    """Tests for pass-through behavior."""

    def test_close_delegates(self, mock_producer: MockSyncProducer, options: list[Option]) -> None:
        """close() closes the wrapped producer."""
        producer = wrap_sync_producer(None, mock_producer, *options)
        producer.close()
        assert mock_producer.closed is True

    def test_unknown_attributes_delegate(self, mock_producer: MockSyncProducer, options: list[Option]) -> None:
        """Attributes not defined by the wrapper come from the wrapped producer."""
        mock_producer.expect_send_message_and_succeed()
        producer = wrap_sync_producer(None, mock_producer, *options)
        assert producer.pending_expectations == 1

    def test_private_attributes_do_not_delegate(self, mock_producer: MockSyncProducer, options: list[Option]) -> None:
        """Private names are never forwarded."""
        producer = wrap_sync_producer(None, mock_producer, *options)
        with pytest.raises(AttributeError):
            producer._expectations  # noqa: B018

    def test_wrapper_type(self, mock_producer: MockSyncProducer, options: list[Option]) -> None:
        assert isinstance(wrap_sync_producer(None, mock_producer, *options), SyncProducer)
