"""Library exceptions for the otelkafka package."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from otelkafka.types import ProducerMessage


class OtelKafkaError(Exception):
    """Base exception for otelkafka library."""

    pass


class ChannelClosed(OtelKafkaError):
    """Raised when sending on, closing, or draining a closed channel."""

    pass


class ProducerClosedError(OtelKafkaError):
    """Raised when an instrumented producer is closed more than once."""

    pass


class ProducerError(OtelKafkaError):
    """Delivery failure reported by an asynchronous producer.

    Pairs the message that could not be produced with the error the
    client reported for it.

    Attributes:
        msg: The message that failed
        err: The underlying client error
    """

    def __init__(self, msg: ProducerMessage, err: BaseException) -> None:
        self.msg = msg
        self.err = err
        super().__init__(f"kafka: Failed to produce message to topic {msg.topic}: {err}")


class ConsumerError(OtelKafkaError):
    """Error reported by a partition consumer for a topic/partition."""

    def __init__(self, topic: str, partition: int, err: BaseException) -> None:
        self.topic = topic
        self.partition = partition
        self.err = err
        super().__init__(f"kafka: error while consuming {topic}/{partition}: {err}")


__all__ = [
    "OtelKafkaError",
    "ChannelClosed",
    "ProducerClosedError",
    "ProducerError",
    "ConsumerError",
]
