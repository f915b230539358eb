"""
Standard span attributes for Kafka instrumentation.

These follow the OpenTelemetry messaging semantic conventions. The
partition uses the Kafka-specific ``messaging.kafka.partition`` key.

Example:
    >>> from otelkafka.attributes import ATTR_MESSAGING_SYSTEM, MESSAGING_SYSTEM_KAFKA
    >>>
    >>> span.set_attribute(ATTR_MESSAGING_SYSTEM, MESSAGING_SYSTEM_KAFKA)
"""

# =============================================================================
# Messaging Attributes (OTEL semantic)
# =============================================================================

ATTR_MESSAGING_SYSTEM = "messaging.system"
"""Messaging system identifier (always 'kafka')."""

ATTR_MESSAGING_DESTINATION_KIND = "messaging.destination_kind"
"""Kind of destination (always 'topic')."""

ATTR_MESSAGING_DESTINATION = "messaging.destination"
"""Topic name."""

ATTR_MESSAGING_OPERATION = "messaging.operation"
"""Messaging operation; set to 'receive' on consumer spans."""

ATTR_MESSAGING_MESSAGE_ID = "messaging.message_id"
"""Offset of the message, as a decimal string."""

# =============================================================================
# Kafka Attributes
# =============================================================================

ATTR_MESSAGING_KAFKA_PARTITION = "messaging.kafka.partition"
"""Partition the message was written to or read from (integer)."""

# =============================================================================
# Attribute Values
# =============================================================================

MESSAGING_SYSTEM_KAFKA = "kafka"
DESTINATION_KIND_TOPIC = "topic"
OPERATION_RECEIVE = "receive"

__all__ = [
    "ATTR_MESSAGING_SYSTEM",
    "ATTR_MESSAGING_DESTINATION_KIND",
    "ATTR_MESSAGING_DESTINATION",
    "ATTR_MESSAGING_OPERATION",
    "ATTR_MESSAGING_MESSAGE_ID",
    "ATTR_MESSAGING_KAFKA_PARTITION",
    "MESSAGING_SYSTEM_KAFKA",
    "DESTINATION_KIND_TOPIC",
    "OPERATION_RECEIVE",
]
