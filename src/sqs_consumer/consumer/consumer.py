"""
Module: consumer.py
Description: Queue consumer wiring receivers to the processor.

Key Components:
- Consumer: owns the config, the shared channel and the handler;
  starts N receiver loops and one processor loop
- start(): non-blocking spawn of all loops
- stop(): cancels the loops and drains in-flight batches
- set_poll_delay(): live change of the polling cadence

Dependencies: asyncio, logger
"""

import asyncio
from typing import List, Optional

from sqs_consumer.consumer.config import ConsumerConfig
from sqs_consumer.consumer.processor import ErrorHook, Handler, Processor
from sqs_consumer.consumer.receiver import Receiver
from sqs_consumer.models.message import Message
from sqs_consumer.utils.logger import get_logger
from sqs_consumer.utils.metrics import MetricsClient

logger = get_logger(__name__)

# A receiver blocks on put() until the processor has taken the previous batch.
CHANNEL_CAPACITY = 1


class Consumer:
    """
    Consumes a queue with a pool of receivers and one processor.

    Messages are not deleted after the handler runs; they become
    visible again once their visibility timeout expires unless the
    handler deletes them itself.

    Attributes:
        queue_url: URL of the consumed queue
        handler: Called once per received message
        config: Immutable ConsumerConfig

    Example:
        >>> consumer = Consumer(queue_url, handle, ConsumerConfig(transport=SQSTransport()))
        >>> consumer.start()
        >>> consumer.set_poll_delay(500)
        >>> await consumer.stop()
    """

    def __init__(
        self,
        queue_url: str,
        handler: Handler,
        config: ConsumerConfig,
        on_handler_error: Optional[ErrorHook] = None,
        metrics: Optional[MetricsClient] = None
    ):
        """
        Initialize consumer.

        Args:
            queue_url: URL of the queue to consume
            handler: Plain or coroutine function taking a Message
            config: Consumer configuration
            on_handler_error: Optional hook for handler exceptions
            metrics: Optional CloudWatch metrics client

        Raises:
            ValueError: If queue_url or handler is invalid
        """
        if not queue_url or not isinstance(queue_url, str):
            raise ValueError("queue_url must be a non-empty string")
        if not callable(handler):
            raise ValueError("handler must be callable")

        self.queue_url = queue_url
        self.handler = handler
        self.config = config
        self.messages_channel: "asyncio.Queue[List[Message]]" = asyncio.Queue(
            maxsize=CHANNEL_CAPACITY
        )
        self.receiver = Receiver(
            queue_url=queue_url,
            channel=self.messages_channel,
            transport=config.transport,
            max_number_of_messages=config.max_number_of_messages,
            visibility_timeout=config.visibility_timeout,
            poll_delay_ms=config.poll_delay_ms
        )
        self.processor = Processor(
            queue_url=queue_url,
            handler=handler,
            on_handler_error=on_handler_error,
            metrics=metrics
        )
        self._receiver_tasks: List[asyncio.Task] = []
        self._processor_task: Optional[asyncio.Task] = None
        self._stopped: Optional[asyncio.Event] = None

        logger.info(
            "Consumer created",
            queue_url=queue_url,
            receivers=config.receivers,
            max_number_of_messages=config.max_number_of_messages,
            visibility_timeout=config.visibility_timeout,
            poll_delay_ms=config.poll_delay_ms
        )

    @property
    def running(self) -> bool:
        """True between start() and stop()."""
        return self._processor_task is not None and not self._processor_task.done()

    @property
    def receiver_count(self) -> int:
        """Number of receiver loops still active."""
        return sum(1 for task in self._receiver_tasks if not task.done())

    def start(self) -> None:
        """
        Spawn the receiver loops and the processor loop, then return.

        Must be called from a running event loop.

        Raises:
            RuntimeError: If the consumer was already started
        """
        if self._processor_task is not None:
            raise RuntimeError("Consumer already started")

        logger.info("Starting to consume", queue_url=self.queue_url)

        self._stopped = asyncio.Event()
        for i in range(self.config.receivers):
            self._receiver_tasks.append(
                asyncio.create_task(self.receiver.run(), name=f"receiver-{i}")
            )
        self._processor_task = asyncio.create_task(
            self.processor.run(self.messages_channel),
            name="processor"
        )

    async def stop(self) -> None:
        """
        Cancel the receiver and processor loops and wait for in-flight batches.

        Safe to call more than once and before start().
        """
        tasks = list(self._receiver_tasks)
        if self._processor_task is not None:
            tasks.append(self._processor_task)
        pending = [task for task in tasks if not task.done()]
        if not pending and (self._stopped is None or self._stopped.is_set()):
            return

        logger.info("Stopping consumer", queue_url=self.queue_url)

        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        await self.processor.wait_idle()

        if self._stopped is not None:
            self._stopped.set()

        logger.info("Consumer stopped", queue_url=self.queue_url)

    async def run(self) -> None:
        """Start the consumer and wait until stop() is called."""
        self.start()
        await self._stopped.wait()

    def set_poll_delay(self, delay_ms: int) -> None:
        """
        Change the pause between polls for every receiver of this consumer.

        Takes effect on each receiver's next cycle.

        Args:
            delay_ms: New delay in milliseconds

        Raises:
            ValueError: If delay_ms is negative
        """
        if isinstance(delay_ms, bool) or not isinstance(delay_ms, int) or delay_ms < 0:
            raise ValueError("delay_ms must be a non-negative integer")

        self.receiver.poll_delay_ms = delay_ms
        logger.info("Poll delay updated", queue_url=self.queue_url, poll_delay_ms=delay_ms)
