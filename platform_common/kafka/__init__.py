"""Kafka consumer contract."""

from platform_common.kafka.consumer import Consumer, Handler, Message

__all__ = [
    "Consumer",
    "Handler",
    "Message",
]
