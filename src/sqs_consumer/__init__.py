"""
Package: sqs_consumer
Description: Polling SQS consumer with a receiver pool and per-batch dispatch.

Exports the pieces most callers need: Consumer, ConsumerConfig, Message,
SQSTransport and the queue management helpers.
"""

from .consumer import Consumer, ConsumerConfig
from .models import Message
from .sqs_queue import (
    MessageSender,
    QueueTransport,
    SQSTransport,
    create_queue,
    delete_message,
    get_messages,
)

__all__ = [
    "Consumer",
    "ConsumerConfig",
    "Message",
    "MessageSender",
    "QueueTransport",
    "SQSTransport",
    "create_queue",
    "get_messages",
    "delete_message",
]
