"""
Module: main.py
Description: Command line entry point for the SQS consumer.

Consumes a queue and logs every received message. Settings come from
SQS_CONSUMER_* environment variables (or .env); command line options
override them. SIGINT and SIGTERM stop the consumer cleanly.

Usage:
    sqs-consumer --queue-url https://sqs.us-east-1.amazonaws.com/123/orders
    sqs-consumer --create-queue orders --receivers 4 --poll-delay-ms 200
"""

import argparse
import asyncio
import signal
import sys
from typing import List, Optional

from pydantic import ValidationError

from sqs_consumer.config.settings import Settings, get_settings
from sqs_consumer.consumer.consumer import Consumer
from sqs_consumer.models.message import Message
from sqs_consumer.sqs_queue.management import create_queue
from sqs_consumer.sqs_queue.sqs import SQSTransport
from sqs_consumer.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def log_message(message: Message) -> None:
    """Default handler: log the message id and body."""
    logger.info(
        "Message received",
        message_id=message.message_id,
        body=message.body,
        receive_count=message.attributes.get('ApproximateReceiveCount')
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqs-consumer",
        description="Consume an SQS queue and log each message"
    )
    parser.add_argument("--queue-url", type=str, help="URL of the queue to consume")
    parser.add_argument(
        "--create-queue",
        metavar="NAME",
        type=str,
        help="Create queue NAME first and consume it"
    )
    parser.add_argument("--receivers", type=int, help="Number of concurrent receivers")
    parser.add_argument("--poll-delay-ms", type=int, help="Delay between polls in milliseconds")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level"
    )
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return a copy of settings with the command line options applied."""
    overrides = {
        'queue_url': args.queue_url,
        'receivers': args.receivers,
        'poll_delay_ms': args.poll_delay_ms,
        'log_level': args.log_level,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    return Settings(**{**settings.model_dump(), **overrides})


async def consume(settings: Settings, create_queue_name: Optional[str] = None) -> None:
    transport = SQSTransport(
        region_name=settings.aws_region,
        endpoint_url=settings.endpoint_url
    )

    queue_url = settings.queue_url
    if create_queue_name:
        queue_url = await create_queue(transport, create_queue_name)
    if not queue_url:
        raise ValueError("queue_url is required (set SQS_CONSUMER_QUEUE_URL or --queue-url)")

    consumer = Consumer(queue_url, log_message, settings.consumer_config(transport))

    install_signal_handlers(consumer)
    await consumer.run()


def install_signal_handlers(consumer: Consumer) -> List[asyncio.Task]:
    """
    Stop the consumer on SIGINT/SIGTERM.

    Only the first signal schedules stop(); the returned list holds that
    task so it is not garbage collected and its outcome is logged.
    """
    loop = asyncio.get_running_loop()
    stopping: List[asyncio.Task] = []

    def _on_stopped(task: asyncio.Task) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.error("Consumer stop failed", error=str(task.exception()))

    def _request_stop(sig: signal.Signals) -> None:
        if stopping:
            logger.info("Shutdown already in progress", signal=sig.name)
            return
        logger.info("Shutdown requested", signal=sig.name)
        task = loop.create_task(consumer.stop())
        task.add_done_callback(_on_stopped)
        stopping.append(task)

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _request_stop, sig)

    return stopping


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = apply_overrides(get_settings(), args)
    except ValidationError as e:
        print(f"ERROR: invalid configuration\n{e}", file=sys.stderr)
        return 2

    configure_logging(settings.log_level)
    logger.info("Starting SQS consumer", app_name=settings.app_name, region=settings.aws_region)

    try:
        asyncio.run(consume(settings, args.create_queue))
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    logger.info("SQS consumer exited")
    return 0


if __name__ == "__main__":
    sys.exit(main())
