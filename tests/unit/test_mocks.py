"""
Unit tests for the otelkafka.testing client doubles.

The instrumentation tests rely on these doubles behaving like the real
client: offsets starting at 1, one-shot partition consumption and
closed output channels after close.
"""

from __future__ import annotations

import pytest

from otelkafka import ChannelClosed, ClientConfig, ConsumerMessage, ProducerMessage
from otelkafka.protocols import AsyncProducer, Consumer, PartitionConsumer, SyncProducer
from otelkafka.testing import (
    MockAsyncProducer,
    MockConsumer,
    MockExpectationError,
    MockPartitionConsumer,
    MockSyncProducer,
)

TOPIC = "test-topic"


class TestMockSyncProducer:
    def test_offsets_start_at_one(self) -> None:
        producer = MockSyncProducer()
        producer.expect_send_message_and_succeed()
        producer.expect_send_message_and_succeed()

        assert producer.send_message(ProducerMessage(topic=TOPIC)) == (0, 1)
        assert producer.send_message(ProducerMessage(topic=TOPIC)) == (0, 2)
        assert producer.pending_expectations == 0

    def test_send_without_expectation_raises(self) -> None:
        with pytest.raises(MockExpectationError):
            MockSyncProducer().send_message(ProducerMessage(topic=TOPIC))

    def test_satisfies_protocol(self) -> None:
        assert isinstance(MockSyncProducer(), SyncProducer)


class TestMockAsyncProducer:
    def test_errors_not_returned_when_disabled(self) -> None:
        """Failures are dropped when the client does not return errors."""
        config = ClientConfig()
        config.producer.return_errors = False
        producer = MockAsyncProducer(config)
        producer.expect_input_and_fail(RuntimeError("boom"))

        producer.input.put(ProducerMessage(topic=TOPIC))
        producer.close()

        assert list(producer.errors) == []
        assert list(producer.successes) == []

    def test_input_closed_after_close(self) -> None:
        producer = MockAsyncProducer()
        producer.close()
        with pytest.raises(ChannelClosed):
            producer.input.put(ProducerMessage(topic=TOPIC))

    def test_satisfies_protocol(self) -> None:
        producer = MockAsyncProducer()
        assert isinstance(producer, AsyncProducer)
        producer.async_close()


class TestMockConsumers:
    def test_yielded_offsets_follow_start_offset(self) -> None:
        partition_consumer = MockPartitionConsumer(TOPIC, 0, offset=10)
        partition_consumer.yield_message(ConsumerMessage())
        partition_consumer.close()

        (msg,) = list(partition_consumer.messages)
        assert (msg.topic, msg.partition, msg.offset) == (TOPIC, 0, 11)

    def test_close_is_idempotent(self) -> None:
        partition_consumer = MockPartitionConsumer(TOPIC, 0)
        partition_consumer.close()
        partition_consumer.close()
        assert partition_consumer.closed is True

    def test_consume_partition_once(self) -> None:
        consumer = MockConsumer()
        expected = consumer.expect_consume_partition(TOPIC, 0, 0)

        assert consumer.consume_partition(TOPIC, 0, 0) is expected
        with pytest.raises(MockExpectationError):
            consumer.consume_partition(TOPIC, 0, 0)

    def test_satisfy_protocols(self) -> None:
        assert isinstance(MockConsumer(), Consumer)
        assert isinstance(MockPartitionConsumer(TOPIC, 0), PartitionConsumer)
