"""
Module: config.py
Description: Immutable consumer configuration.

Key Components:
- ConsumerConfig: transport handle plus polling tunables

Dependencies: pydantic
"""

from typing import Any
from pydantic import BaseModel, ConfigDict, Field, field_validator

from sqs_consumer.sqs_queue.transport import QueueTransport

# SQS refuses ReceiveMessage requests for more than 10 messages.
MAX_MESSAGES_PER_POLL = 10
MAX_VISIBILITY_TIMEOUT = 43200


class ConsumerConfig(BaseModel):
    """
    Configuration for consuming and processing a queue.

    Attributes:
        transport: QueueTransport used by receivers and the processor
        max_number_of_messages: Messages requested per poll
        visibility_timeout: Seconds a received message stays hidden
        receivers: Number of concurrent receiver loops
        poll_delay_ms: Pause between polls of a single receiver
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    transport: Any = Field(..., description="Queue transport")
    max_number_of_messages: int = Field(
        default=MAX_MESSAGES_PER_POLL,
        ge=1,
        le=MAX_MESSAGES_PER_POLL,
        description="Messages requested per poll"
    )
    visibility_timeout: int = Field(
        default=30,
        ge=0,
        le=MAX_VISIBILITY_TIMEOUT,
        description="Visibility timeout in seconds"
    )
    receivers: int = Field(default=1, ge=1, description="Concurrent receiver loops")
    poll_delay_ms: int = Field(default=0, ge=0, description="Delay between polls in milliseconds")

    @field_validator('transport')
    @classmethod
    def validate_transport(cls, v: Any) -> Any:
        """Validate the transport implements QueueTransport."""
        if not isinstance(v, QueueTransport):
            raise ValueError("transport must implement QueueTransport")
        return v
