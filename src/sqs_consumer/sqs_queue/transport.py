"""
Module: transport.py
Description: Queue capabilities consumed by the consumer.

The receiver and the management helpers only talk to the queue
through QueueTransport, so any object offering receive, delete and
create can back a Consumer. Sending is a separate capability used by
producers and local tooling.
"""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from sqs_consumer.models.message import Message


@runtime_checkable
class QueueTransport(Protocol):
    """Async operations the consumer needs from a message queue."""

    async def receive_messages(
        self,
        queue_url: str,
        max_number_of_messages: int,
        visibility_timeout: Optional[int] = None
    ) -> List[Message]:
        ...

    async def delete_message(self, queue_url: str, receipt_handle: str) -> None:
        ...

    async def create_queue(self, name: str, attributes: Dict[str, str]) -> str:
        ...


@runtime_checkable
class MessageSender(Protocol):
    """Publishing side of a queue."""

    async def send_message(
        self,
        queue_url: str,
        body: str,
        delay_seconds: int = 0,
        message_attributes: Optional[Dict[str, Any]] = None
    ) -> str:
        ...
