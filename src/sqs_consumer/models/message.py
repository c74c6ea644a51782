"""
Module: message.py
Description: Message model for messages received from SQS.

Key Components:
- Message: one delivery of a queue message, with its receipt handle
- Message.from_sqs(): build a Message from a ReceiveMessage entry

Dependencies: pydantic, typing
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class Message(BaseModel):
    """
    A single message delivered by the queue.

    The consumer never inspects the body; it forwards the whole
    Message to the handler. The receipt handle identifies this
    particular delivery and is what delete_message() needs.

    Attributes:
        message_id: Queue-assigned message identifier
        receipt_handle: Token for deleting this delivery
        body: Raw message body
        md5_of_body: MD5 digest of the body as reported by SQS
        attributes: System attributes (ApproximateReceiveCount, ...)
        message_attributes: User-defined message attributes
    """

    model_config = ConfigDict(frozen=True)

    message_id: str = Field(..., min_length=1, description="Message identifier")
    receipt_handle: str = Field(..., min_length=1, description="Receipt handle")
    body: str = Field(default="", description="Message body")
    md5_of_body: Optional[str] = Field(default=None, description="MD5 of body")
    attributes: Dict[str, str] = Field(default_factory=dict)
    message_attributes: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_sqs(cls, raw: Dict[str, Any]) -> "Message":
        """
        Build a Message from one entry of ReceiveMessage's Messages list.

        Args:
            raw: Message dictionary as returned by botocore

        Returns:
            Message instance
        """
        return cls(
            message_id=raw['MessageId'],
            receipt_handle=raw['ReceiptHandle'],
            body=raw.get('Body', ''),
            md5_of_body=raw.get('MD5OfBody'),
            attributes=raw.get('Attributes') or {},
            message_attributes=raw.get('MessageAttributes') or {},
        )
