"""
Instrumentation configuration.

Options are plain callables applied left to right by :func:`new_config`.
Any option left out, or given ``None``, falls back to the process-global
OpenTelemetry provider or propagator.

Example:
    >>> from opentelemetry.trace.propagation.tracecontext import (
    ...     TraceContextTextMapPropagator,
    ... )
    >>> config = new_config(
    ...     with_tracer_provider(provider),
    ...     with_propagator(TraceContextTextMapPropagator()),
    ... )
    >>> config.tracer.start_span("orders send")
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from opentelemetry import metrics, propagate, trace
from opentelemetry.metrics import Meter, MeterProvider
from opentelemetry.propagators.textmap import TextMapPropagator
from opentelemetry.trace import Tracer, TracerProvider
from pydantic import BaseModel, ConfigDict

from otelkafka.attributes import (
    ATTR_MESSAGING_DESTINATION,
    ATTR_MESSAGING_DESTINATION_KIND,
    ATTR_MESSAGING_KAFKA_PARTITION,
    ATTR_MESSAGING_MESSAGE_ID,
    ATTR_MESSAGING_OPERATION,
    ATTR_MESSAGING_SYSTEM,
)
from otelkafka.version import INSTRUMENTATION_NAME, sem_version


class MessagingSemconv(BaseModel):
    """
    Attribute keys written on producer and consumer spans.

    Attributes:
        system: Key of the messaging system attribute
        destination_kind: Key of the destination kind attribute
        destination: Key of the topic attribute
        operation: Key of the operation attribute (consumer spans)
        message_id: Key of the offset attribute
        partition: Key of the partition attribute
    """

    model_config = ConfigDict(frozen=True)

    system: str = ATTR_MESSAGING_SYSTEM
    destination_kind: str = ATTR_MESSAGING_DESTINATION_KIND
    destination: str = ATTR_MESSAGING_DESTINATION
    operation: str = ATTR_MESSAGING_OPERATION
    message_id: str = ATTR_MESSAGING_MESSAGE_ID
    partition: str = ATTR_MESSAGING_KAFKA_PARTITION


class Config(BaseModel):
    """
    Resolved instrumentation configuration.

    Immutable once built. The tracer and meter are acquired once and
    shared by every span and instrument of the owning wrapper.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    tracer_provider: TracerProvider
    tracer: Tracer
    meter_provider: MeterProvider
    meter: Meter
    propagator: TextMapPropagator
    semconv: MessagingSemconv = MessagingSemconv()


Option = Callable[[dict[str, Any]], None]
"""Configures one setting of a :class:`Config` under construction."""


def with_tracer_provider(provider: TracerProvider | None) -> Option:
    """Use ``provider`` to create spans. ``None`` keeps the global provider."""

    def apply(settings: dict[str, Any]) -> None:
        if provider is not None:
            settings["tracer_provider"] = provider

    return apply


def with_meter_provider(provider: MeterProvider | None) -> Option:
    """Use ``provider`` for client metrics. ``None`` keeps the global provider."""

    def apply(settings: dict[str, Any]) -> None:
        if provider is not None:
            settings["meter_provider"] = provider

    return apply


def with_propagator(propagator: TextMapPropagator | None) -> Option:
    """Propagate context with ``propagator``. ``None`` keeps the global propagator."""

    def apply(settings: dict[str, Any]) -> None:
        if propagator is not None:
            settings["propagator"] = propagator

    return apply


def new_config(*options: Option) -> Config:
    """
    Build a :class:`Config` from options.

    Args:
        *options: Options applied in order; later options win

    Returns:
        Frozen configuration with tracer and meter acquired
    """
    settings: dict[str, Any] = {}
    for option in options:
        option(settings)

    tracer_provider = settings.get("tracer_provider") or trace.get_tracer_provider()
    meter_provider = settings.get("meter_provider") or metrics.get_meter_provider()
    propagator = settings.get("propagator") or propagate.get_global_textmap()

    return Config(
        tracer_provider=tracer_provider,
        tracer=tracer_provider.get_tracer(INSTRUMENTATION_NAME, sem_version()),
        meter_provider=meter_provider,
        meter=meter_provider.get_meter(INSTRUMENTATION_NAME, sem_version()),
        propagator=propagator,
    )


__all__ = [
    "Config",
    "MessagingSemconv",
    "Option",
    "new_config",
    "with_tracer_provider",
    "with_meter_provider",
    "with_propagator",
]
