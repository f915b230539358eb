"""
Text-map carriers over Kafka record headers.

Propagators read and write trace context through these carriers. Both
variants share one contract:

- ``get(key)`` returns the value of the first header with that key, or ``""``
- ``set(key, value)`` replaces every header with that key by a single one
- ``keys()`` lists header keys in order

Consumer headers may contain ``None`` entries, which are skipped. Bytes that
are not valid UTF-8 decode to replacement characters.
"""

from __future__ import annotations

from collections.abc import Iterable

from opentelemetry.propagators.textmap import Getter, Setter

from otelkafka.types import ConsumerMessage, ProducerMessage, RecordHeader


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


class MessageCarrier:
    """Base carrier reading and writing the ``headers`` list of a message."""

    def _headers(self) -> Iterable[RecordHeader | None]:
        raise NotImplementedError

    def _replace(self, key: bytes, header: RecordHeader) -> None:
        raise NotImplementedError

    def get(self, key: str) -> str:
        """Return the first value stored under ``key``, or an empty string."""
        wanted = key.encode("utf-8")
        for header in self._headers():
            if header is not None and header.key == wanted:
                return _decode(header.value)
        return ""

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, dropping previous values for it."""
        raw_key = key.encode("utf-8")
        self._replace(raw_key, RecordHeader(key=raw_key, value=value.encode("utf-8")))

    def keys(self) -> list[str]:
        """Return all header keys in header order."""
        return [_decode(header.key) for header in self._headers() if header is not None]


class ProducerMessageCarrier(MessageCarrier):
    """Carrier over the headers of a :class:`ProducerMessage`."""

    def __init__(self, msg: ProducerMessage) -> None:
        self.msg = msg

    def _headers(self) -> Iterable[RecordHeader]:
        return self.msg.headers

    def _replace(self, key: bytes, header: RecordHeader) -> None:
        kept = [h for h in self.msg.headers if h.key != key]
        kept.append(header)
        self.msg.headers = kept


class ConsumerMessageCarrier(MessageCarrier):
    """Carrier over the headers of a :class:`ConsumerMessage`."""

    def __init__(self, msg: ConsumerMessage) -> None:
        self.msg = msg

    def _headers(self) -> Iterable[RecordHeader | None]:
        return self.msg.headers

    def _replace(self, key: bytes, header: RecordHeader) -> None:
        kept = [h for h in self.msg.headers if h is None or h.key != key]
        kept.append(header)
        self.msg.headers = kept


class MessageCarrierGetter(Getter[MessageCarrier]):
    """Adapts a :class:`MessageCarrier` to ``TextMapPropagator.extract``."""

    def get(self, carrier: MessageCarrier, key: str) -> list[str] | None:
        value = carrier.get(key)
        if not value:
            return None
        return [value]

    def keys(self, carrier: MessageCarrier) -> list[str]:
        return carrier.keys()


class MessageCarrierSetter(Setter[MessageCarrier]):
    """Adapts a :class:`MessageCarrier` to ``TextMapPropagator.inject``."""

    def set(self, carrier: MessageCarrier, key: str, value: str) -> None:
        carrier.set(key, value)


carrier_getter = MessageCarrierGetter()
carrier_setter = MessageCarrierSetter()

__all__ = [
    "MessageCarrier",
    "ProducerMessageCarrier",
    "ConsumerMessageCarrier",
    "MessageCarrierGetter",
    "MessageCarrierSetter",
    "carrier_getter",
    "carrier_setter",
]
