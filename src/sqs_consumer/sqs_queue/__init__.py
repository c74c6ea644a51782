"""
Package: sqs_queue
Description: Queue transport and queue management helpers.

- transport: QueueTransport capability consumed by the consumer
- sqs: aioboto3-backed SQSTransport
- management: create_queue, get_messages, delete_message
"""

from .management import create_queue, delete_message, get_messages
from .sqs import SQSTransport
from .transport import MessageSender, QueueTransport

__all__ = [
    "MessageSender",
    "QueueTransport",
    "SQSTransport",
    "create_queue",
    "get_messages",
    "delete_message",
]
