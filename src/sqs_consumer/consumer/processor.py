"""
Module: processor.py
Description: Drains the shared channel and dispatches to the handler.

Every batch taken off the channel gets its own task; inside that task
the handler is called once per message, in the order the batch was
received. Plain (non-coroutine) handlers run in a worker thread so a
blocking handler never holds up other batches or the receivers.
Handler failures are logged and reported to the optional error hook,
never retried, and never cause a delete.
"""

import asyncio
import inspect
from typing import Any, Callable, List, Optional, Set

from sqs_consumer.models.message import Message
from sqs_consumer.utils.logger import get_logger
from sqs_consumer.utils.metrics import MetricsClient

logger = get_logger(__name__)

Handler = Callable[[Message], Any]
ErrorHook = Callable[[Message, Exception], Any]


class Processor:
    """
    Fans batches out to per-batch tasks.

    Attributes:
        queue_url: URL of the queue the batches came from
        handler: User handler, plain or coroutine function
        on_handler_error: Optional hook called with (message, exception)
        metrics: Optional CloudWatch metrics client
    """

    def __init__(
        self,
        queue_url: str,
        handler: Handler,
        on_handler_error: Optional[ErrorHook] = None,
        metrics: Optional[MetricsClient] = None
    ):
        self.queue_url = queue_url
        self.handler = handler
        self.on_handler_error = on_handler_error
        self.metrics = metrics
        self._tasks: Set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        """Number of batch tasks still running."""
        return len(self._tasks)

    async def run(self, channel: "asyncio.Queue[List[Message]]") -> None:
        """Take batches off the channel forever and spawn a task for each."""
        while True:
            batch = await channel.get()
            task = asyncio.create_task(self.process_messages(batch))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            channel.task_done()

    async def process_messages(self, batch: List[Message]) -> None:
        """
        Invoke the handler for every message of a batch, sequentially.

        Args:
            batch: Messages in received order
        """
        failures = 0

        for message in batch:
            try:
                await self._invoke(message)
            except Exception as e:
                failures += 1
                logger.error(
                    "Handler failed",
                    queue_url=self.queue_url,
                    message_id=message.message_id,
                    error=str(e),
                    error_type=type(e).__name__
                )
                await self._report(message, e)

        if self.metrics is not None and batch:
            await asyncio.to_thread(
                self.metrics.publish_batch, self.queue_url, len(batch), failures
            )

        logger.debug(
            "Batch processed",
            queue_url=self.queue_url,
            count=len(batch),
            failures=failures
        )

    async def wait_idle(self) -> None:
        """Wait for every in-flight batch task to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _invoke(self, message: Message) -> None:
        if inspect.iscoroutinefunction(self.handler):
            await self.handler(message)
            return
        result = await asyncio.to_thread(self.handler, message)
        if inspect.isawaitable(result):
            await result

    async def _report(self, message: Message, error: Exception) -> None:
        if self.on_handler_error is None:
            return
        try:
            result = self.on_handler_error(message, error)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(
                "Handler error hook failed",
                message_id=message.message_id,
                error=str(e)
            )
