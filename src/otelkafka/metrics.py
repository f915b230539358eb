"""
Kafka client metrics as OpenTelemetry observable gauges.

Kafka clients keep an internal metric registry (request sizes, rates,
compression). This module exports a fixed set of those metrics through
the configured meter. Values are read from the registry each time the
OpenTelemetry SDK collects.

Registry entries may be:
    - histograms, exposing ``mean()``
    - gauges, exposing ``value()``
    - meters, exposing ``rate1()``
    - plain numbers

Producer metrics:
    - ``batch-size``: Mean bytes sent per partition per request
    - ``record-send-rate``: Records/second sent to all topics
    - ``records-per-request``: Mean records sent per request
    - ``compression-ratio``: Mean compression ratio (x100) of record batches

Consumer metrics:
    - ``consumer-batch-size``: Mean messages per batch
    - ``consumer-fetch-rate``: Fetch requests/second sent to all brokers
    - ``consumer-fetch-response-size``: Mean fetch response size in bytes

Example:
    >>> from otelkafka import start_producer_metrics, with_meter_provider
    >>>
    >>> start_producer_metrics(client.metric_registry, with_meter_provider(provider))
"""

from __future__ import annotations

import logging
import numbers
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from opentelemetry.metrics import CallbackOptions, Observation

from otelkafka.config import Config, Option, new_config
from otelkafka.types import MetricRegistry

logger = logging.getLogger(__name__)


def _histogram_mean(metric: Any) -> float:
    return float(metric.mean())


def _gauge_value(metric: Any) -> float:
    if hasattr(metric, "value"):
        return float(metric.value())
    return float(metric.rate1())


@dataclass(frozen=True)
class ClientMetric:
    """
    One client registry metric exported as a gauge.

    Attributes:
        name: Registry name, also used as instrument name
        unit: Instrument unit
        description: Instrument description
        read: Extracts the value from a registry entry
    """

    name: str
    unit: str
    description: str
    read: Callable[[Any], float]


PRODUCER_METRICS: tuple[ClientMetric, ...] = (
    ClientMetric(
        name="batch-size",
        unit="By",
        description="Distribution of the number of bytes sent per partition per request for all topics",
        read=_histogram_mean,
    ),
    ClientMetric(
        name="record-send-rate",
        unit="1",
        description="Records/second sent to all topics",
        read=_gauge_value,
    ),
    ClientMetric(
        name="records-per-request",
        unit="1",
        description="Distribution of the number of records sent per request for all topics",
        read=_histogram_mean,
    ),
    ClientMetric(
        name="compression-ratio",
        unit="1",
        description="Distribution of the compression ratio times 100 of record batches for all topics",
        read=_histogram_mean,
    ),
)

CONSUMER_METRICS: tuple[ClientMetric, ...] = (
    ClientMetric(
        name="consumer-batch-size",
        unit="1",
        description="Distribution of the number of messages in a batch",
        read=_histogram_mean,
    ),
    ClientMetric(
        name="consumer-fetch-rate",
        unit="1",
        description="Fetch requests/second sent to all brokers",
        read=_gauge_value,
    ),
    ClientMetric(
        name="consumer-fetch-response-size",
        unit="By",
        description="Distribution of the fetch response size in bytes",
        read=_histogram_mean,
    ),
)


def _observe(registry: MetricRegistry, metric: ClientMetric) -> Callable[[CallbackOptions], Iterable[Observation]]:
    def callback(options: CallbackOptions) -> Iterable[Observation]:
        """Report the current registry value, if the registry has one."""
        entry = registry.get(metric.name)
        if entry is None:
            return
        try:
            if isinstance(entry, numbers.Real):
                value = float(entry)
            else:
                value = metric.read(entry)
        except (AttributeError, TypeError, ValueError) as e:
            logger.debug("Skipping client metric %s: %s", metric.name, e)
            return
        yield Observation(value)

    return callback


def _register(registry: MetricRegistry | None, config: Config, metrics: tuple[ClientMetric, ...]) -> int:
    if registry is None:
        return 0

    for metric in metrics:
        config.meter.create_observable_gauge(
            name=metric.name,
            callbacks=[_observe(registry, metric)],
            unit=metric.unit,
            description=metric.description,
        )

    logger.debug("Registered %d client metric gauges", len(metrics))
    return len(metrics)


def start_producer_metrics(
    registry: MetricRegistry | None,
    *options: Option,
    config: Config | None = None,
) -> int:
    """
    Export the producer metrics of ``registry``.

    Args:
        registry: Client metric registry; ``None`` registers nothing
        *options: Instrumentation options, used when ``config`` is not given
        config: Already resolved configuration

    Returns:
        Number of gauges registered
    """
    return _register(registry, config or new_config(*options), PRODUCER_METRICS)


def start_consumer_metrics(
    registry: MetricRegistry | None,
    *options: Option,
    config: Config | None = None,
) -> int:
    """
    Export the consumer metrics of ``registry``.

    Args:
        registry: Client metric registry; ``None`` registers nothing
        *options: Instrumentation options, used when ``config`` is not given
        config: Already resolved configuration

    Returns:
        Number of gauges registered
    """
    return _register(registry, config or new_config(*options), CONSUMER_METRICS)


__all__ = [
    "ClientMetric",
    "PRODUCER_METRICS",
    "CONSUMER_METRICS",
    "start_producer_metrics",
    "start_consumer_metrics",
]
