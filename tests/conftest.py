"""
Module: conftest.py
Description: Shared pytest fixtures for SQS consumer tests.

Provides an in-memory queue transport, message factories and polling
helpers so the consumer can be exercised without AWS.
"""

import asyncio
from collections import deque

import pytest
from botocore.exceptions import ClientError

from sqs_consumer.config.settings import Settings
from sqs_consumer.consumer.config import ConsumerConfig
from sqs_consumer.models.message import Message


class FakeTransport:
    """
    In-memory QueueTransport.

    Each receive call first raises the next queued failure, if any,
    then returns the next queued batch, then empty batches forever.
    Every call is recorded.
    """

    def __init__(self, batches=None, failures=None, queue_url="https://sqs.test/123/fake"):
        self.batches = deque(batches or [])
        self.failures = deque(failures or [])
        self.queue_url = queue_url
        self.receive_calls = []
        self.deleted = []
        self.created = []
        self.sent = []
        self.delete_error = None
        self.create_error = None

    async def receive_messages(self, queue_url, max_number_of_messages, visibility_timeout=None):
        self.receive_calls.append((queue_url, max_number_of_messages, visibility_timeout))
        if self.failures:
            raise self.failures.popleft()
        if self.batches:
            return self.batches.popleft()
        return []

    async def delete_message(self, queue_url, receipt_handle):
        if self.delete_error is not None:
            raise self.delete_error
        self.deleted.append((queue_url, receipt_handle))

    async def create_queue(self, name, attributes):
        if self.create_error is not None:
            raise self.create_error
        self.created.append((name, attributes))
        return f"https://sqs.test/123/{name}"

    async def send_message(self, queue_url, body, delay_seconds=0, message_attributes=None):
        self.sent.append((queue_url, body))
        return f"msg-{len(self.sent)}"


@pytest.fixture
def make_message():
    """Factory for Message instances with predictable handles."""
    def _make(message_id, body="{}"):
        return Message(
            message_id=message_id,
            receipt_handle=f"rh-{message_id}",
            body=body
        )
    return _make


@pytest.fixture
def fake_transport():
    """Factory for FakeTransport instances."""
    return FakeTransport


@pytest.fixture
def client_error():
    """Factory for botocore ClientError instances."""
    def _make(code="ServiceUnavailable", operation="ReceiveMessage"):
        return ClientError(
            error_response={'Error': {'Code': code, 'Message': 'Test error'}},
            operation_name=operation
        )
    return _make


@pytest.fixture
def consumer_config():
    """Factory for ConsumerConfig with test-friendly defaults."""
    def _make(transport, **overrides):
        values = {
            'max_number_of_messages': 10,
            'visibility_timeout': 30,
            'receivers': 1,
            'poll_delay_ms': 1,
        }
        values.update(overrides)
        return ConsumerConfig(transport=transport, **values)
    return _make


@pytest.fixture
def eventually():
    """Await until predicate() is true or fail after timeout seconds."""
    async def _wait(predicate, timeout=1.0, interval=0.005):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                pytest.fail("condition not met before timeout")
            await asyncio.sleep(interval)
    return _wait


@pytest.fixture
def test_settings(monkeypatch):
    """
    Provide settings isolated from the developer environment.

    Clears SQS_CONSUMER_* variables and disables .env loading.
    """
    import os
    for key in list(os.environ):
        if key.startswith("SQS_CONSUMER_"):
            monkeypatch.delenv(key)
    return Settings(_env_file=None)
