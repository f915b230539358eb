"""
Kafka client data model.

Messages, record headers, protocol versions and client settings shared
by the client interfaces in :mod:`otelkafka.protocols` and the
instrumented wrappers.

Producer headers are stored by value while consumer headers may contain
``None`` entries, mirroring how the client decodes record batches.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol


@dataclass(frozen=True)
class RecordHeader:
    """A single Kafka record header. Keys are case-sensitive."""

    key: bytes
    value: bytes


@dataclass(eq=False)
class ProducerMessage:
    """
    A message handed to a producer.

    ``partition`` and ``offset`` are filled in by the client once the
    message is acknowledged. ``metadata`` is never sent to the broker; it is
    returned untouched with the success or error for the message.
    """

    topic: str
    key: bytes | None = None
    value: bytes | None = None
    headers: list[RecordHeader] = field(default_factory=list)
    metadata: Any = None
    offset: int = 0
    partition: int = 0
    timestamp: datetime | None = None


@dataclass(eq=False)
class ConsumerMessage:
    """A message delivered by a consumer."""

    topic: str = ""
    partition: int = 0
    offset: int = 0
    key: bytes | None = None
    value: bytes | None = None
    headers: list[RecordHeader | None] = field(default_factory=list)
    timestamp: datetime | None = None


@functools.total_ordering
@dataclass(frozen=True)
class KafkaVersion:
    """
    Kafka protocol version the client speaks.

    Example:
        >>> KafkaVersion.parse("2.1.0").is_at_least(V0_11_0_0)
        True
    """

    parts: tuple[int, int, int, int]

    @classmethod
    def parse(cls, text: str) -> KafkaVersion:
        """Parse ``"major.minor.patch[.build]"``."""
        pieces = text.strip().split(".")
        if not 2 <= len(pieces) <= 4:
            raise ValueError(f"invalid Kafka version: {text!r}")
        try:
            numbers = [int(piece) for piece in pieces]
        except ValueError as e:
            raise ValueError(f"invalid Kafka version: {text!r}") from e
        numbers.extend([0] * (4 - len(numbers)))
        return cls((numbers[0], numbers[1], numbers[2], numbers[3]))

    def is_at_least(self, other: KafkaVersion) -> bool:
        return self.parts >= other.parts

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, KafkaVersion):
            return NotImplemented
        return self.parts < other.parts

    def __str__(self) -> str:
        major, minor, patch, build = self.parts
        if major == 0:
            return f"{major}.{minor}.{patch}.{build}"
        return f"{major}.{minor}.{patch}"


V0_10_2_0 = KafkaVersion((0, 10, 2, 0))
V0_11_0_0 = KafkaVersion((0, 11, 0, 0))
"""First version with record headers."""
V2_1_0_0 = KafkaVersion((2, 1, 0, 0))
DEFAULT_VERSION = V2_1_0_0


class MetricRegistry(Protocol):
    """Read access to the client's internal metric registry."""

    def get(self, name: str) -> Any: ...


@dataclass
class ProducerSettings:
    """
    Producer delivery-report settings.

    Attributes:
        return_successes: Deliver acknowledged messages on the successes channel
        return_errors: Deliver failed messages on the errors channel
    """

    return_successes: bool = False
    return_errors: bool = True


@dataclass
class ClientConfig:
    """
    Settings of the wrapped Kafka client that affect instrumentation.

    Attributes:
        version: Protocol version; headers are only injected from 0.11 on
        producer: Delivery-report settings
        metric_registry: Client metric registry exported as gauges (optional)
    """

    version: KafkaVersion = DEFAULT_VERSION
    producer: ProducerSettings = field(default_factory=ProducerSettings)
    metric_registry: MetricRegistry | None = None


__all__ = [
    "RecordHeader",
    "ProducerMessage",
    "ConsumerMessage",
    "KafkaVersion",
    "MetricRegistry",
    "ProducerSettings",
    "ClientConfig",
    "V0_10_2_0",
    "V0_11_0_0",
    "V2_1_0_0",
    "DEFAULT_VERSION",
]
