"""
Module: settings.py
Description: Application configuration using pydantic-settings.

Loads the consumer settings from SQS_CONSUMER_* environment variables
with validation and defaults. Supports .env files for local development.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sqs_consumer.consumer.config import (
    MAX_MESSAGES_PER_POLL,
    MAX_VISIBILITY_TIMEOUT,
    ConsumerConfig,
)
from sqs_consumer.sqs_queue.transport import QueueTransport


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SQS_CONSUMER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="sqs-consumer", description="Application name")
    log_level: str = Field(default="INFO", description="Logging level")

    # AWS settings
    aws_region: str = Field(default="us-east-1", description="AWS region")
    endpoint_url: Optional[str] = Field(
        default=None,
        description="SQS endpoint override, e.g. LocalStack"
    )

    # Queue settings
    queue_url: Optional[str] = Field(default=None, description="URL of the queue to consume")

    # Consumer settings
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
        description="Visibility timeout in seconds for received messages"
    )
    receivers: int = Field(default=1, ge=1, description="Concurrent receiver loops")
    poll_delay_ms: int = Field(default=0, ge=0, description="Delay between polls in milliseconds")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @field_validator('queue_url', 'endpoint_url')
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate optional URLs are HTTP(S)."""
        if v is None:
            return v
        if not v.startswith(('http://', 'https://')):
            raise ValueError("URL must be a valid HTTP/HTTPS URL")
        return v

    def consumer_config(self, transport: QueueTransport) -> ConsumerConfig:
        """Build a ConsumerConfig for the given transport from these settings."""
        return ConsumerConfig(
            transport=transport,
            max_number_of_messages=self.max_number_of_messages,
            visibility_timeout=self.visibility_timeout,
            receivers=self.receivers,
            poll_delay_ms=self.poll_delay_ms
        )


@lru_cache
def get_settings() -> Settings:
    """Return the process settings, loaded on first use."""
    return Settings()
