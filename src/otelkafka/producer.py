"""
Instrumented Kafka producers.

Wrapping a producer starts one PRODUCER span per message and injects
its context into the message headers, so consumers can continue the
trace.

Synchronous producers are traced around each send call. Asynchronous
producers are traced across threads: the instrumented producer owns its
own ``input``, ``successes`` and ``errors`` channels and runs three
driver threads between them and the wrapped producer:

- the input driver starts the span and forwards the message
- the success driver ends the span with the acknowledged partition/offset
- the error driver ends the span with an error status

While a message is in flight, its ``metadata`` holds a correlation token
numbered per wrapper, which locates the span when the message comes
back. The caller's metadata is restored before the message is handed
back on ``successes`` or ``errors``.

Example:
    >>> from otelkafka import ClientConfig, ProducerSettings, wrap_async_producer
    >>>
    >>> client_config = ClientConfig(producer=ProducerSettings(return_successes=True))
    >>> producer = wrap_async_producer(client_config, client_producer)
    >>> producer.input.put(ProducerMessage(topic="orders", value=b"..."))
    >>> acked = producer.successes.get()
    >>> producer.close()
"""

from __future__ import annotations

import enum
import itertools
import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any

from opentelemetry.trace import Span

from otelkafka.channel import Channel
from otelkafka.config import Config, Option, new_config
from otelkafka.exceptions import ChannelClosed, ProducerClosedError, ProducerError
from otelkafka.metrics import start_producer_metrics
from otelkafka.protocols import AsyncProducer as AsyncProducerProtocol
from otelkafka.protocols import SyncProducer as SyncProducerProtocol
from otelkafka.spans import finish_producer_span, start_producer_span
from otelkafka.types import ClientConfig, ProducerMessage

logger = logging.getLogger(__name__)


class SyncProducer:
    """
    Synchronous producer that traces every message it sends.

    Results and exceptions of the wrapped producer are passed through
    unchanged. Attributes not defined here are looked up on the wrapped
    producer.
    """

    def __init__(
        self,
        producer: SyncProducerProtocol,
        config: Config,
        client_config: ClientConfig,
    ) -> None:
        self._producer = producer
        self._config = config
        self._client_config = client_config

    def send_message(self, msg: ProducerMessage) -> tuple[int, int]:
        """
        Send one message within a producer span.

        Returns:
            ``(partition, offset)`` from the wrapped producer

        Raises:
            Exception: Whatever the wrapped producer raised
        """
        span = start_producer_span(self._config, self._client_config.version, msg)
        try:
            partition, offset = self._producer.send_message(msg)
        except Exception as e:
            finish_producer_span(span, msg.partition, msg.offset, e, self._config.semconv)
            raise
        finish_producer_span(span, partition, offset, None, self._config.semconv)
        return partition, offset

    def send_messages(self, msgs: list[ProducerMessage]) -> None:
        """
        Send a batch, with one producer span per message.

        The wrapped producer is called once. Each span is finished with the
        partition/offset populated on its message, and all spans share the
        batch error, if any.
        """
        # One client call, but messages are delivered individually.
        spans = [start_producer_span(self._config, self._client_config.version, msg) for msg in msgs]
        error: Exception | None = None
        try:
            self._producer.send_messages(msgs)
        except Exception as e:
            error = e
            raise
        finally:
            for msg, span in zip(msgs, spans, strict=True):
                finish_producer_span(span, msg.partition, msg.offset, error, self._config.semconv)

    def close(self) -> None:
        self._producer.close()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._producer, name)


@dataclass(frozen=True)
class _CorrelationToken:
    """Stand-in for message metadata while a message is in flight.

    ``sequence`` is unique per wrapper. ``span_id`` is informational only:
    no-op tracers report 0 for every span.
    """

    sequence: int
    span_id: int


@dataclass
class _SpanRecord:
    span: Span
    metadata: Any


class _CloseMode(enum.Enum):
    SYNC = "sync"
    ASYNC = "async"


class AsyncProducer:
    """
    Asynchronous producer that traces every message put on ``input``.

    Mirrors the wrapped producer's channel contract: each message put on
    ``input`` comes back on ``successes`` (when enabled) or ``errors``,
    and both channels are closed once the wrapped producer has shut down.

    Closing twice, in any combination of :meth:`close` and
    :meth:`async_close`, raises :class:`ProducerClosedError`. Putting on
    ``input`` after close raises :class:`ChannelClosed`.
    """

    def __init__(
        self,
        producer: AsyncProducerProtocol,
        config: Config,
        client_config: ClientConfig,
    ) -> None:
        self._producer = producer
        self._config = config
        self._client_config = client_config

        self._input: Channel[ProducerMessage] = Channel()
        self._successes: Channel[ProducerMessage] = Channel()
        self._errors: Channel[ProducerError] = Channel()

        self._records: dict[_CorrelationToken, _SpanRecord] = {}
        self._records_lock = threading.Lock()
        self._sequence = itertools.count(1)

        self._close_lock = threading.Lock()
        self._close_mode: _CloseMode | None = None
        self._close_result: queue.Queue[BaseException | None] = queue.Queue(maxsize=1)

        self._input_thread = self._start_driver(self._run_input, "input")
        self._successes_thread = self._start_driver(self._run_successes, "successes")
        self._errors_thread = self._start_driver(self._run_errors, "errors")
        self._cleanup_thread: threading.Thread | None = None

    @property
    def input(self) -> Channel[ProducerMessage]:
        return self._input

    @property
    def successes(self) -> Channel[ProducerMessage]:
        return self._successes

    @property
    def errors(self) -> Channel[ProducerError]:
        return self._errors

    @property
    def in_flight(self) -> int:
        """Number of spans waiting for a success or error report."""
        with self._records_lock:
            return len(self._records)

    def close(self) -> None:
        """
        Flush pending messages, shut down the wrapped producer and wait.

        When this returns, every driver thread has exited and every span has
        ended. ``successes`` and ``errors`` remain readable until drained.

        Raises:
            ProducerClosedError: If the producer was already closed
            Exception: The error raised by the wrapped producer's close
        """
        self._begin_close(_CloseMode.SYNC)
        result = self._close_result.get()

        self._input_thread.join()
        self._successes_thread.join()
        self._errors_thread.join()
        if self._cleanup_thread is not None:
            self._cleanup_thread.join()

        if result is not None:
            raise result

    def async_close(self) -> None:
        """
        Trigger shutdown of the wrapped producer without waiting.

        Read ``successes`` and ``errors`` until closed to observe the
        remaining outcomes.

        Raises:
            ProducerClosedError: If the producer was already closed
        """
        self._begin_close(_CloseMode.ASYNC)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._producer, name)

    def _begin_close(self, mode: _CloseMode) -> None:
        with self._close_lock:
            if self._close_mode is not None:
                raise ProducerClosedError(
                    f"producer already closed ({self._close_mode.value}), cannot close ({mode.value})"
                )
            self._close_mode = mode

        logger.debug("Closing instrumented async producer", extra={"mode": mode.value})
        self._cleanup_thread = self._start_driver(self._run_cleanup, "cleanup")
        self._input.close()

    def _start_driver(self, target: Any, role: str) -> threading.Thread:
        thread = threading.Thread(
            target=target,
            name=f"otelkafka-async-producer-{role}",
            daemon=True,
        )
        thread.start()
        return thread

    def _store_record(self, token: _CorrelationToken, record: _SpanRecord) -> None:
        with self._records_lock:
            self._records[token] = record

    def _pop_record(self, metadata: Any) -> _SpanRecord | None:
        if not isinstance(metadata, _CorrelationToken):
            return None
        with self._records_lock:
            return self._records.pop(metadata, None)

    def _run_input(self) -> None:
        try:
            for msg in self._input:
                self._forward(msg)
        finally:
            self._close_upstream()

    def _forward(self, msg: ProducerMessage) -> None:
        track = self._client_config.producer.return_successes
        span = start_producer_span(self._config, self._client_config.version, msg)

        token: _CorrelationToken | None = None
        if track:
            # Only the input driver draws from the sequence.
            token = _CorrelationToken(next(self._sequence), span.get_span_context().span_id)
            # Stored before forwarding so an early success can find it.
            self._store_record(token, _SpanRecord(span=span, metadata=msg.metadata))
            msg.metadata = token

        try:
            self._producer.input.put(msg)
        except Exception as e:
            self._reject(msg, span, token, e)
            return

        if not track:
            # No later event can retire this span.
            finish_producer_span(span, msg.partition, msg.offset, None, self._config.semconv)

    def _close_upstream(self) -> None:
        mode = self._close_mode
        if mode is _CloseMode.SYNC:
            result: BaseException | None = None
            try:
                self._producer.close()
            except Exception as e:
                result = e
            self._close_result.put(result)
        elif mode is _CloseMode.ASYNC:
            try:
                self._producer.async_close()
            except Exception:
                logger.exception("Wrapped producer failed to close")

    def _reject(
        self,
        msg: ProducerMessage,
        span: Span,
        token: _CorrelationToken | None,
        err: Exception,
    ) -> None:
        logger.warning("Wrapped producer rejected message to topic %s: %s", msg.topic, err)
        if token is not None:
            record = self._pop_record(token)
            if record is not None:
                msg.metadata = record.metadata
        finish_producer_span(span, msg.partition, msg.offset, err, self._config.semconv)
        try:
            self._errors.put(ProducerError(msg, err))
        except ChannelClosed:
            logger.debug("Errors channel already closed, dropping failure report")

    def _run_successes(self) -> None:
        for msg in self._producer.successes:
            record = self._pop_record(msg.metadata)
            if record is not None:
                msg.metadata = record.metadata
                finish_producer_span(record.span, msg.partition, msg.offset, None, self._config.semconv)
            self._successes.put(msg)
        self._successes.close()

    def _run_errors(self) -> None:
        for error in self._producer.errors:
            record = self._pop_record(error.msg.metadata)
            if record is not None:
                error.msg.metadata = record.metadata
                finish_producer_span(
                    record.span,
                    error.msg.partition,
                    error.msg.offset,
                    error.err,
                    self._config.semconv,
                )
            self._errors.put(error)
        # Rejected inputs are reported here too.
        self._input_thread.join()
        self._errors.close()

    def _run_cleanup(self) -> None:
        self._successes_thread.join()
        self._errors_thread.join()

        with self._records_lock:
            leftovers = list(self._records.values())
            self._records.clear()

        if leftovers:
            logger.debug("Ending %d spans never reported by the wrapped producer", len(leftovers))
        for record in leftovers:
            record.span.end()


def wrap_sync_producer(
    client_config: ClientConfig | None,
    producer: SyncProducerProtocol,
    *options: Option,
) -> SyncProducer:
    """
    Wrap a synchronous producer so that every produced message is traced.

    Args:
        client_config: Settings of the wrapped client (defaults if ``None``)
        producer: Producer to wrap
        *options: Instrumentation options

    Returns:
        Instrumented producer
    """
    config = new_config(*options)
    client_config = client_config or ClientConfig()
    if client_config.metric_registry is not None:
        start_producer_metrics(client_config.metric_registry, config=config)
    return SyncProducer(producer, config, client_config)


def wrap_async_producer(
    client_config: ClientConfig | None,
    producer: AsyncProducerProtocol,
    *options: Option,
) -> AsyncProducer:
    """
    Wrap an asynchronous producer so that every produced message is traced.

    The client config tells whether successes are reported. Without
    success reports the span is ended as soon as the message is handed to
    the producer, and carries no partition or offset.

    Args:
        client_config: Settings of the wrapped client (defaults if ``None``)
        producer: Producer to wrap
        *options: Instrumentation options

    Returns:
        Instrumented producer; its driver threads are already running
    """
    config = new_config(*options)
    client_config = client_config or ClientConfig()
    if client_config.metric_registry is not None:
        start_producer_metrics(client_config.metric_registry, config=config)
    return AsyncProducer(producer, config, client_config)


__all__ = [
    "SyncProducer",
    "AsyncProducer",
    "wrap_sync_producer",
    "wrap_async_producer",
]
