"""
Canonical protocol definitions for the Kafka client interfaces.

The instrumented wrappers accept any object satisfying these protocols
and return objects satisfying the same protocols, so instrumentation can
be added without changing calling code.

Protocols:
- SyncProducer: Blocking send of one message or a batch
- AsyncProducer: Channel-based producer with success/error reporting
- PartitionConsumer: Message source for one topic partition
- Consumer: Factory for partition consumers
- ConsumerGroupSession / ConsumerGroupClaim: Consumer-group assignment state
- ConsumerGroupHandler: User callbacks driven by a consumer group

Example:
    >>> from otelkafka import wrap_sync_producer
    >>>
    >>> producer: SyncProducer = make_client_producer()
    >>> producer = wrap_sync_producer(client_config, producer)
    >>> partition, offset = producer.send_message(ProducerMessage(topic="orders"))
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from otelkafka.channel import Channel
from otelkafka.exceptions import ConsumerError, ProducerError
from otelkafka.types import ConsumerMessage, ProducerMessage


@runtime_checkable
class SyncProducer(Protocol):
    """
    Protocol for blocking producers.

    Failures are raised from the send call that caused them.
    """

    def send_message(self, msg: ProducerMessage) -> tuple[int, int]:
        """
        Produce one message and wait for the acknowledgement.

        Args:
            msg: Message to produce

        Returns:
            ``(partition, offset)`` the message was written to

        Raises:
            Exception: If the message could not be produced
        """
        ...

    def send_messages(self, msgs: list[ProducerMessage]) -> None:
        """
        Produce a batch and wait for every acknowledgement.

        ``partition`` and ``offset`` of each message are populated on return.

        Raises:
            Exception: If any message could not be produced
        """
        ...

    def close(self) -> None: ...


@runtime_checkable
class AsyncProducer(Protocol):
    """
    Protocol for channel-based producers.

    Every message put on ``input`` is eventually reported on ``successes``
    (when enabled) or ``errors``. Both output channels are closed once the
    producer has shut down.
    """

    @property
    def input(self) -> Channel[ProducerMessage]: ...

    @property
    def successes(self) -> Channel[ProducerMessage]: ...

    @property
    def errors(self) -> Channel[ProducerError]: ...

    def close(self) -> None:
        """
        Flush buffered messages and shut down.

        Raises:
            Exception: If shutdown failed
        """
        ...

    def async_close(self) -> None:
        """Trigger shutdown without waiting for it."""
        ...


@runtime_checkable
class PartitionConsumer(Protocol):
    """Protocol for a message source bound to one topic partition."""

    @property
    def messages(self) -> Channel[ConsumerMessage]: ...

    @property
    def errors(self) -> Channel[ConsumerError]: ...

    def close(self) -> None: ...

    def async_close(self) -> None: ...

    def high_water_mark_offset(self) -> int: ...


@runtime_checkable
class Consumer(Protocol):
    """Protocol for consumers creating partition consumers."""

    def consume_partition(self, topic: str, partition: int, offset: int) -> PartitionConsumer:
        """
        Start consuming a topic partition at ``offset``.

        Raises:
            Exception: If the partition cannot be consumed
        """
        ...

    def topics(self) -> list[str]: ...

    def partitions(self, topic: str) -> list[int]: ...

    def close(self) -> None: ...


@runtime_checkable
class ConsumerGroupSession(Protocol):
    """Protocol for the state of one consumer-group generation."""

    @property
    def member_id(self) -> str: ...

    @property
    def generation_id(self) -> int: ...

    def claims(self) -> dict[str, list[int]]: ...

    def mark_message(self, msg: ConsumerMessage, metadata: str) -> None: ...


@runtime_checkable
class ConsumerGroupClaim(Protocol):
    """Protocol for the messages of one partition claimed by a group member."""

    @property
    def topic(self) -> str: ...

    @property
    def partition(self) -> int: ...

    @property
    def initial_offset(self) -> int: ...

    def high_water_mark_offset(self) -> int: ...

    @property
    def messages(self) -> Channel[ConsumerMessage]: ...


@runtime_checkable
class ConsumerGroupHandler(Protocol):
    """
    Protocol for user callbacks of a consumer group.

    ``consume_claim`` runs once per claimed partition and should return
    when the claim's ``messages`` channel is closed.
    """

    def setup(self, session: ConsumerGroupSession) -> Any: ...

    def cleanup(self, session: ConsumerGroupSession) -> Any: ...

    def consume_claim(self, session: ConsumerGroupSession, claim: ConsumerGroupClaim) -> Any: ...


__all__ = [
    "SyncProducer",
    "AsyncProducer",
    "PartitionConsumer",
    "Consumer",
    "ConsumerGroupSession",
    "ConsumerGroupClaim",
    "ConsumerGroupHandler",
]
