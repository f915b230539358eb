"""Consumer-group handler instrumentation."""

from __future__ import annotations

from typing import Any

from otelkafka.channel import Channel
from otelkafka.config import Config, Option, new_config
from otelkafka.consumer import ConsumerMessagesDispatcher
from otelkafka.protocols import ConsumerGroupClaim as ConsumerGroupClaimProtocol
from otelkafka.protocols import ConsumerGroupHandler as ConsumerGroupHandlerProtocol
from otelkafka.protocols import ConsumerGroupSession
from otelkafka.types import ConsumerMessage


class ConsumerGroupClaim:
    """A claim whose ``messages`` come through a tracing dispatcher."""

    def __init__(self, claim: ConsumerGroupClaimProtocol, dispatcher: ConsumerMessagesDispatcher) -> None:
        self._claim = claim
        self._dispatcher = dispatcher

    @property
    def topic(self) -> str:
        return self._claim.topic

    @property
    def partition(self) -> int:
        return self._claim.partition

    @property
    def initial_offset(self) -> int:
        return self._claim.initial_offset

    def high_water_mark_offset(self) -> int:
        return self._claim.high_water_mark_offset()

    @property
    def messages(self) -> Channel[ConsumerMessage]:
        return self._dispatcher.messages


class ConsumerGroupHandler:
    """
    Handler that traces every message of every claim.

    ``setup`` and ``cleanup`` are delegated unchanged. Each
    ``consume_claim`` gets a fresh dispatcher that lives as long as the
    claim's message channel.
    """

    def __init__(self, handler: ConsumerGroupHandlerProtocol, config: Config) -> None:
        self._handler = handler
        self._config = config

    def setup(self, session: ConsumerGroupSession) -> Any:
        return self._handler.setup(session)

    def cleanup(self, session: ConsumerGroupSession) -> Any:
        return self._handler.cleanup(session)

    def consume_claim(self, session: ConsumerGroupSession, claim: ConsumerGroupClaimProtocol) -> Any:
        dispatcher = ConsumerMessagesDispatcher(claim.messages, self._config).start()
        return self._handler.consume_claim(session, ConsumerGroupClaim(claim, dispatcher))


def wrap_consumer_group_handler(
    handler: ConsumerGroupHandlerProtocol,
    *options: Option,
) -> ConsumerGroupHandler:
    """
    Wrap a consumer-group handler so that every claimed message is traced.

    Args:
        handler: The application's handler
        *options: Instrumentation options

    Returns:
        Handler to pass to the consumer group instead of ``handler``
    """
    return ConsumerGroupHandler(handler, new_config(*options))


__all__ = [
    "ConsumerGroupClaim",
    "ConsumerGroupHandler",
    "wrap_consumer_group_handler",
]
