"""
Module: receiver.py
Description: Polling loop that feeds batches onto the shared channel.

A single Receiver is shared by every polling task a Consumer starts,
so changing poll_delay_ms on it affects all of them on their next
cycle.
"""

import asyncio
from typing import List

from sqs_consumer.models.message import Message
from sqs_consumer.sqs_queue.transport import QueueTransport
from sqs_consumer.utils.logger import get_logger

logger = get_logger(__name__)


class Receiver:
    """
    Polls the queue and publishes non-empty batches.

    Attributes:
        queue_url: URL of the queue being polled
        poll_delay_ms: Pause after every poll; read fresh each cycle
    """

    def __init__(
        self,
        queue_url: str,
        channel: "asyncio.Queue[List[Message]]",
        transport: QueueTransport,
        max_number_of_messages: int,
        visibility_timeout: int,
        poll_delay_ms: int = 0
    ):
        self.queue_url = queue_url
        self.channel = channel
        self.transport = transport
        self.max_number_of_messages = max_number_of_messages
        self.visibility_timeout = visibility_timeout
        self.poll_delay_ms = poll_delay_ms

    async def poll(self) -> int:
        """
        Run one receive cycle.

        Transport errors are logged and swallowed so one failing poll
        never stops the loop.

        Returns:
            Number of messages published to the channel
        """
        try:
            batch = await self.transport.receive_messages(
                self.queue_url,
                self.max_number_of_messages,
                self.visibility_timeout
            )
        except Exception as e:
            logger.error(
                "Failed to receive messages",
                queue_url=self.queue_url,
                error=str(e),
                error_type=type(e).__name__
            )
            return 0

        if not batch:
            return 0

        logger.debug("Batch received", queue_url=self.queue_url, count=len(batch))
        await self.channel.put(list(batch))
        return len(batch)

    async def run(self) -> None:
        """Poll forever, sleeping poll_delay_ms between cycles. Ends on cancellation."""
        while True:
            await self.poll()
            await asyncio.sleep(self.poll_delay_ms / 1000)
