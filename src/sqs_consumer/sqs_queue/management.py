"""
Module: management.py
Description: Queue management helpers.

Stateless passthroughs to the transport. Errors propagate to the
caller unchanged; nothing here retries or validates.
"""

from typing import List

from sqs_consumer.models.message import Message
from sqs_consumer.sqs_queue.transport import QueueTransport

DEFAULT_QUEUE_ATTRIBUTES = {
    "DelaySeconds": "0",
    "VisibilityTimeout": "60",
}

# get_messages() ignores its max_messages argument and always asks for this many.
GET_MESSAGES_CAP = 1


async def create_queue(transport: QueueTransport, name: str) -> str:
    """Create queue `name` with the default attributes and return its URL."""
    return await transport.create_queue(name, dict(DEFAULT_QUEUE_ATTRIBUTES))


async def get_messages(
    transport: QueueTransport,
    queue_url: str,
    max_messages: int
) -> List[Message]:
    """
    Fetch messages from a queue.

    max_messages is accepted for interface compatibility but the
    request is always made with a cap of GET_MESSAGES_CAP, using the
    queue's own visibility timeout.
    """
    return await transport.receive_messages(queue_url, GET_MESSAGES_CAP, None)


async def delete_message(
    transport: QueueTransport,
    queue_url: str,
    receipt_handle: str
) -> None:
    """Delete a message by receipt handle."""
    await transport.delete_message(queue_url, receipt_handle)
