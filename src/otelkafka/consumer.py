"""
Instrumented Kafka consumers.

A dispatcher thread sits between the wrapped message source and the
application. For every message it starts a CONSUMER span, writes the
span's context into the message headers and hands the message over on
a rendezvous channel. The span stays open until the application has
taken the message, so work started from the re-injected context nests
under it.

Messages are never dropped, reordered or retried.

Example:
    >>> from otelkafka import wrap_consumer
    >>>
    >>> consumer = wrap_consumer(client_consumer)
    >>> partition_consumer = consumer.consume_partition("orders", 0, 0)
    >>> for msg in partition_consumer.messages:
    ...     handle(msg)
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from otelkafka.channel import Channel
from otelkafka.config import Config, Option, new_config
from otelkafka.protocols import Consumer as ConsumerProtocol
from otelkafka.protocols import PartitionConsumer as PartitionConsumerProtocol
from otelkafka.spans import start_consumer_span
from otelkafka.types import ConsumerMessage

logger = logging.getLogger(__name__)


class ConsumerMessagesDispatcher:
    """
    Re-emits messages from a source channel with one consumer span each.

    The dispatcher owns its output channel and driver thread but not the
    source; it stops, and closes its output, when the source is closed.

    Args:
        source: Channel the wrapped client delivers messages on
        config: Instrumentation configuration
    """

    def __init__(self, source: Channel[ConsumerMessage], config: Config) -> None:
        self._source = source
        self._config = config
        self._messages: Channel[ConsumerMessage] = Channel(capacity=0)
        self._thread: threading.Thread | None = None

    @property
    def messages(self) -> Channel[ConsumerMessage]:
        return self._messages

    def start(self) -> ConsumerMessagesDispatcher:
        """Start the driver thread. Returns ``self`` for chaining."""
        if self._thread is not None:
            raise RuntimeError("dispatcher already started")
        self._thread = threading.Thread(
            target=self._run,
            name="otelkafka-consumer-dispatcher",
            daemon=True,
        )
        self._thread.start()
        return self

    def join(self, timeout: float | None = None) -> None:
        """Wait for the driver thread to exit."""
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self) -> None:
        for msg in self._source:
            span = start_consumer_span(self._config, msg)
            try:
                self._messages.put(msg)
            finally:
                span.end()
        logger.debug("Message source closed, stopping consumer dispatcher")
        self._messages.close()


class PartitionConsumer:
    """
    Partition consumer whose ``messages`` are traced.

    Everything except ``messages`` is served by the wrapped partition
    consumer. Closing the wrapped consumer closes ``messages`` once the
    remaining messages were taken.
    """

    def __init__(self, partition_consumer: PartitionConsumerProtocol, config: Config) -> None:
        self._partition_consumer = partition_consumer
        self._dispatcher = ConsumerMessagesDispatcher(partition_consumer.messages, config).start()

    @property
    def messages(self) -> Channel[ConsumerMessage]:
        return self._dispatcher.messages

    def close(self) -> None:
        self._partition_consumer.close()

    def async_close(self) -> None:
        self._partition_consumer.async_close()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._partition_consumer, name)


class Consumer:
    """Consumer whose partition consumers are traced."""

    def __init__(self, consumer: ConsumerProtocol, config: Config) -> None:
        self._consumer = consumer
        self._config = config

    def consume_partition(self, topic: str, partition: int, offset: int) -> PartitionConsumer:
        """
        Consume a topic partition through an instrumented partition consumer.

        Raises:
            Exception: Whatever the wrapped consumer raised
        """
        partition_consumer = self._consumer.consume_partition(topic, partition, offset)
        return PartitionConsumer(partition_consumer, self._config)

    def close(self) -> None:
        self._consumer.close()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._consumer, name)


def wrap_partition_consumer(
    partition_consumer: PartitionConsumerProtocol,
    *options: Option,
) -> PartitionConsumer:
    """
    Wrap a partition consumer so that every received message is traced.

    Args:
        partition_consumer: Partition consumer to wrap
        *options: Instrumentation options

    Returns:
        Instrumented partition consumer
    """
    return PartitionConsumer(partition_consumer, new_config(*options))


def wrap_consumer(consumer: ConsumerProtocol, *options: Option) -> Consumer:
    """
    Wrap a consumer so that every partition consumer it creates is traced.

    Args:
        consumer: Consumer to wrap
        *options: Instrumentation options

    Returns:
        Instrumented consumer
    """
    return Consumer(consumer, new_config(*options))


__all__ = [
    "ConsumerMessagesDispatcher",
    "PartitionConsumer",
    "Consumer",
    "wrap_partition_consumer",
    "wrap_consumer",
]
