"""
otelkafka - OpenTelemetry tracing for Kafka producers and consumers.

This library provides:
- Instrumented sync and async producers with one PRODUCER span per message
- Instrumented partition consumers and consumer-group handlers with one
  CONSUMER span per message
- Trace context propagation through Kafka record headers
- Export of Kafka client metrics as OpenTelemetry gauges
"""

from otelkafka.carrier import ConsumerMessageCarrier, ProducerMessageCarrier
from otelkafka.channel import Channel
from otelkafka.config import (
    Config,
    MessagingSemconv,
    Option,
    new_config,
    with_meter_provider,
    with_propagator,
    with_tracer_provider,
)
from otelkafka.consumer import (
    Consumer,
    PartitionConsumer,
    wrap_consumer,
    wrap_partition_consumer,
)
from otelkafka.consumer_group import ConsumerGroupHandler, wrap_consumer_group_handler
from otelkafka.exceptions import (
    ChannelClosed,
    ConsumerError,
    OtelKafkaError,
    ProducerClosedError,
    ProducerError,
)
from otelkafka.metrics import start_consumer_metrics, start_producer_metrics
from otelkafka.producer import (
    AsyncProducer,
    SyncProducer,
    wrap_async_producer,
    wrap_sync_producer,
)
from otelkafka.types import (
    DEFAULT_VERSION,
    V0_10_2_0,
    V0_11_0_0,
    V2_1_0_0,
    ClientConfig,
    ConsumerMessage,
    KafkaVersion,
    ProducerMessage,
    ProducerSettings,
    RecordHeader,
)
from otelkafka.version import __version__, sem_version

__all__ = [
    "__version__",
    "sem_version",
    # Wrappers
    "wrap_sync_producer",
    "wrap_async_producer",
    "wrap_partition_consumer",
    "wrap_consumer",
    "wrap_consumer_group_handler",
    "SyncProducer",
    "AsyncProducer",
    "PartitionConsumer",
    "Consumer",
    "ConsumerGroupHandler",
    # Configuration
    "Config",
    "MessagingSemconv",
    "Option",
    "new_config",
    "with_tracer_provider",
    "with_meter_provider",
    "with_propagator",
    # Propagation
    "ProducerMessageCarrier",
    "ConsumerMessageCarrier",
    # Metrics
    "start_producer_metrics",
    "start_consumer_metrics",
    # Client data model
    "Channel",
    "ClientConfig",
    "ProducerSettings",
    "KafkaVersion",
    "ProducerMessage",
    "ConsumerMessage",
    "RecordHeader",
    "DEFAULT_VERSION",
    "V0_10_2_0",
    "V0_11_0_0",
    "V2_1_0_0",
    # Exceptions
    "OtelKafkaError",
    "ChannelClosed",
    "ProducerClosedError",
    "ProducerError",
    "ConsumerError",
]
