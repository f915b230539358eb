"""
Test utilities for otelkafka.

In-memory doubles of the Kafka client interfaces, for exercising
instrumented producers and consumers without a broker.

Components:
    MockSyncProducer / MockAsyncProducer: Producers answering from expectations
    MockConsumer / MockPartitionConsumer: Consumers delivering yielded messages
    MockConsumerGroupClaim / MockConsumerGroupSession: Consumer-group state

Example:
    >>> from otelkafka import ClientConfig, ProducerSettings, wrap_async_producer
    >>> from otelkafka.testing import MockAsyncProducer
    >>>
    >>> client_config = ClientConfig(producer=ProducerSettings(return_successes=True))
    >>> mock = MockAsyncProducer(client_config)
    >>> mock.expect_input_and_succeed()
    >>> producer = wrap_async_producer(client_config, mock)

Note:
    This module is intended for test code only. It should not be imported
    in production code paths.
"""

from otelkafka.testing.mocks import (
    MockAsyncProducer,
    MockConsumer,
    MockConsumerGroupClaim,
    MockConsumerGroupSession,
    MockExpectationError,
    MockPartitionConsumer,
    MockSyncProducer,
)

__all__ = [
    "MockExpectationError",
    "MockSyncProducer",
    "MockAsyncProducer",
    "MockPartitionConsumer",
    "MockConsumer",
    "MockConsumerGroupClaim",
    "MockConsumerGroupSession",
]
