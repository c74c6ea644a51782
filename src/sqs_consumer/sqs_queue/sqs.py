"""
Module: sqs.py
Description: aioboto3 implementation of the queue transport.

Handles receiving batches of messages, deleting messages by receipt
handle, creating queues and sending messages. Each call opens its own
client from a shared aioboto3 Session, so one SQSTransport can be used
concurrently by every receiver and the processor.
"""

from typing import Any, Dict, List, Optional
from aioboto3 import Session
from botocore.exceptions import ClientError

from sqs_consumer.models.message import Message
from sqs_consumer.utils.logger import get_logger

logger = get_logger(__name__)


def _require(value: Any, name: str) -> None:
    if not value or not isinstance(value, str):
        raise ValueError(f"{name} must be a non-empty string")


class SQSTransport:
    """
    SQS transport for the consumer.

    Attributes:
        session: aioboto3 Session shared by all calls
        region_name: AWS region passed to every client
        endpoint_url: Optional endpoint override (LocalStack, ElasticMQ)

    Example:
        >>> transport = SQSTransport(region_name="us-east-1")
        >>> batch = await transport.receive_messages(queue_url, 10, 30)
    """

    def __init__(
        self,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        session: Optional[Session] = None
    ):
        """
        Initialize SQS transport.

        Args:
            region_name: AWS region for the sqs client
            endpoint_url: Optional endpoint override
            session: Existing aioboto3 Session to reuse
        """
        self.session = session or Session()
        self.region_name = region_name
        self.endpoint_url = endpoint_url

        logger.info(
            "SQS transport initialized",
            region_name=region_name,
            endpoint_url=endpoint_url
        )

    def _client(self):
        return self.session.client(
            'sqs',
            region_name=self.region_name,
            endpoint_url=self.endpoint_url
        )

    async def receive_messages(
        self,
        queue_url: str,
        max_number_of_messages: int,
        visibility_timeout: Optional[int] = None
    ) -> List[Message]:
        """
        Receive up to max_number_of_messages from the queue.

        Args:
            queue_url: URL of the SQS queue
            max_number_of_messages: Batch size cap (1-10)
            visibility_timeout: Seconds the messages stay hidden,
                None for the queue's default

        Returns:
            Received messages, possibly empty

        Raises:
            ClientError: If SQS operation fails
            ValueError: If queue_url is invalid
        """
        _require(queue_url, "queue_url")

        params = {
            'QueueUrl': queue_url,
            'MaxNumberOfMessages': max_number_of_messages,
            'AttributeNames': ['All'],
            'MessageAttributeNames': ['All']
        }
        if visibility_timeout is not None:
            params['VisibilityTimeout'] = visibility_timeout

        try:
            async with self._client() as sqs:
                response = await sqs.receive_message(**params)

            messages = [Message.from_sqs(raw) for raw in response.get('Messages', [])]

            logger.debug(
                "Messages received from SQS",
                queue_url=queue_url,
                count=len(messages)
            )

            return messages

        except ClientError as e:
            logger.error(
                "Failed to receive messages from SQS",
                queue_url=queue_url,
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message']
            )
            raise

    async def delete_message(self, queue_url: str, receipt_handle: str) -> None:
        """
        Delete one delivery of a message.

        Args:
            queue_url: URL of the SQS queue
            receipt_handle: Receipt handle of the delivery

        Raises:
            ClientError: If SQS operation fails
            ValueError: If parameters are invalid
        """
        _require(queue_url, "queue_url")
        _require(receipt_handle, "receipt_handle")

        try:
            async with self._client() as sqs:
                await sqs.delete_message(
                    QueueUrl=queue_url,
                    ReceiptHandle=receipt_handle
                )

            logger.info("Message deleted from SQS", queue_url=queue_url)

        except ClientError as e:
            logger.error(
                "Failed to delete message from SQS",
                queue_url=queue_url,
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message']
            )
            raise

    async def create_queue(self, name: str, attributes: Dict[str, str]) -> str:
        """
        Create a queue, or return the URL of an identical existing one.

        Args:
            name: Queue name
            attributes: SQS queue attributes, string-encoded

        Returns:
            Queue URL

        Raises:
            ClientError: If SQS operation fails
            ValueError: If name is invalid
        """
        _require(name, "name")

        try:
            async with self._client() as sqs:
                response = await sqs.create_queue(
                    QueueName=name,
                    Attributes=attributes
                )

            queue_url = response['QueueUrl']
            logger.info("SQS queue created", queue_name=name, queue_url=queue_url)

            return queue_url

        except ClientError as e:
            logger.error(
                "Failed to create SQS queue",
                queue_name=name,
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message']
            )
            raise

    async def send_message(
        self,
        queue_url: str,
        body: str,
        delay_seconds: int = 0,
        message_attributes: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Send a message to the queue.

        Args:
            queue_url: URL of the SQS queue
            body: Message body
            delay_seconds: Optional delay before message becomes available
            message_attributes: Optional SQS message attributes

        Returns:
            Message ID from SQS

        Raises:
            ClientError: If SQS operation fails
            ValueError: If parameters are invalid
        """
        _require(queue_url, "queue_url")
        if not isinstance(body, str):
            raise ValueError("body must be a string")

        params = {
            'QueueUrl': queue_url,
            'MessageBody': body,
            'DelaySeconds': delay_seconds
        }
        if message_attributes:
            params['MessageAttributes'] = message_attributes

        try:
            async with self._client() as sqs:
                response = await sqs.send_message(**params)

            message_id = response['MessageId']
            logger.info(
                "Message sent to SQS",
                message_id=message_id,
                queue_url=queue_url
            )

            return message_id

        except ClientError as e:
            logger.error(
                "Failed to send message to SQS",
                queue_url=queue_url,
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message']
            )
            raise
