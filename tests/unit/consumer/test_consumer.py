"""
Module: test_consumer.py
Description: Unit tests for Consumer wiring and lifecycle.

Tests construction, start/stop, receiver pool size, live poll delay
changes and end-to-end delivery through a fake transport.
"""

import asyncio
import threading

import pytest
from pydantic import ValidationError

from sqs_consumer.consumer.config import ConsumerConfig
from sqs_consumer.consumer.consumer import Consumer

QUEUE_URL = "https://sqs.test/123/orders"


class TestConsumerConfig:
    """Test cases for ConsumerConfig validation."""

    def test_defaults(self, fake_transport):
        """Test default tunables."""
        transport = fake_transport()
        config = ConsumerConfig(transport=transport)

        assert config.transport is transport
        assert config.max_number_of_messages == 10
        assert config.visibility_timeout == 30
        assert config.receivers == 1
        assert config.poll_delay_ms == 0

    @pytest.mark.parametrize("field,value", [
        ("max_number_of_messages", 0),
        ("max_number_of_messages", 11),
        ("visibility_timeout", -1),
        ("receivers", 0),
        ("poll_delay_ms", -5),
    ])
    def test_out_of_range_values_rejected(self, fake_transport, field, value):
        """Test bounds on every tunable."""
        with pytest.raises(ValidationError):
            ConsumerConfig(transport=fake_transport(), **{field: value})

    def test_transport_must_implement_protocol(self):
        """Test objects without the transport methods are rejected."""
        with pytest.raises(ValidationError, match="transport must implement QueueTransport"):
            ConsumerConfig(transport=object())

    def test_transport_with_only_queue_operations_accepted(self):
        """Test a transport offering receive, delete and create is enough."""
        class ReceiveDeleteCreateTransport:
            async def receive_messages(self, queue_url, max_number_of_messages, visibility_timeout=None):
                return []

            async def delete_message(self, queue_url, receipt_handle):
                return None

            async def create_queue(self, name, attributes):
                return f"https://sqs.test/123/{name}"

        transport = ReceiveDeleteCreateTransport()

        config = ConsumerConfig(transport=transport)

        assert config.transport is transport

    def test_config_is_immutable(self, fake_transport):
        """Test configuration cannot be changed after construction."""
        config = ConsumerConfig(transport=fake_transport())

        with pytest.raises(ValidationError):
            config.receivers = 4


class TestConsumerInit:
    """Test cases for Consumer construction."""

    def test_initialization(self, fake_transport, consumer_config):
        """Test the receiver polls through the configured transport."""
        transport = fake_transport()
        config = consumer_config(transport, poll_delay_ms=20)

        consumer = Consumer(QUEUE_URL, lambda m: None, config)

        assert consumer.queue_url == QUEUE_URL
        assert consumer.receiver.transport is transport
        assert consumer.receiver.poll_delay_ms == 20
        assert consumer.receiver.channel is consumer.messages_channel
        assert consumer.running is False

    def test_invalid_queue_url(self, fake_transport, consumer_config):
        """Test an empty queue URL is rejected."""
        with pytest.raises(ValueError, match="queue_url must be a non-empty string"):
            Consumer("", lambda m: None, consumer_config(fake_transport()))

    def test_invalid_handler(self, fake_transport, consumer_config):
        """Test a non-callable handler is rejected."""
        with pytest.raises(ValueError, match="handler must be callable"):
            Consumer(QUEUE_URL, "not callable", consumer_config(fake_transport()))


class TestConsumerLifecycle:
    """Test cases for start, stop and run."""

    @pytest.mark.asyncio
    async def test_start_spawns_receivers_and_one_processor(self, fake_transport, consumer_config):
        """Test exactly N receiver loops and one processor loop are running."""
        consumer = Consumer(QUEUE_URL, lambda m: None, consumer_config(fake_transport(), receivers=3))

        consumer.start()
        try:
            await asyncio.sleep(0.01)
            assert consumer.receiver_count == 3
            assert consumer.running is True
        finally:
            await consumer.stop()

    @pytest.mark.asyncio
    async def test_start_returns_immediately(self, fake_transport, consumer_config):
        """Test start does not poll before control returns to the caller."""
        transport = fake_transport()
        consumer = Consumer(QUEUE_URL, lambda m: None, consumer_config(transport))

        consumer.start()
        try:
            assert transport.receive_calls == []
        finally:
            await consumer.stop()

    @pytest.mark.asyncio
    async def test_second_start_rejected(self, fake_transport, consumer_config):
        """Test a consumer cannot be started twice."""
        consumer = Consumer(QUEUE_URL, lambda m: None, consumer_config(fake_transport()))

        consumer.start()
        try:
            with pytest.raises(RuntimeError, match="Consumer already started"):
                consumer.start()
        finally:
            await consumer.stop()

    @pytest.mark.asyncio
    async def test_stop_cancels_loops(self, fake_transport, consumer_config):
        """Test stop ends every loop and can be repeated."""
        consumer = Consumer(QUEUE_URL, lambda m: None, consumer_config(fake_transport(), receivers=2))
        consumer.start()
        await asyncio.sleep(0.01)

        await consumer.stop()
        await consumer.stop()

        assert consumer.running is False
        assert consumer.receiver_count == 0

    @pytest.mark.asyncio
    async def test_stop_before_start_is_noop(self, fake_transport, consumer_config):
        """Test stop on a consumer that never started."""
        consumer = Consumer(QUEUE_URL, lambda m: None, consumer_config(fake_transport()))

        await consumer.stop()

        assert consumer.running is False

    @pytest.mark.asyncio
    async def test_stop_waits_for_in_flight_batches(
        self, fake_transport, consumer_config, make_message, eventually
    ):
        """Test messages already dispatched finish before stop returns."""
        started = []
        finished = []

        async def handler(message):
            started.append(message.message_id)
            await asyncio.sleep(0.05)
            finished.append(message.message_id)

        transport = fake_transport(batches=[[make_message("m1"), make_message("m2")]])
        consumer = Consumer(QUEUE_URL, handler, consumer_config(transport))
        consumer.start()
        await eventually(lambda: started)

        await consumer.stop()

        assert finished == ["m1", "m2"]

    @pytest.mark.asyncio
    async def test_run_returns_after_stop(self, fake_transport, consumer_config, eventually):
        """Test run blocks until stop is called."""
        consumer = Consumer(QUEUE_URL, lambda m: None, consumer_config(fake_transport()))

        task = asyncio.create_task(consumer.run())
        await eventually(lambda: consumer.running)
        assert not task.done()

        await consumer.stop()
        await asyncio.wait_for(task, timeout=1.0)


class TestConsumerDelivery:
    """End-to-end dispatch through the fake transport."""

    @pytest.mark.asyncio
    async def test_single_message_delivered_once_with_two_receivers(
        self, fake_transport, consumer_config, make_message, eventually
    ):
        """Test one queued message reaches the handler exactly once."""
        received = []
        lock = threading.Lock()

        def handler(message):
            with lock:
                received.append(message.message_id)

        transport = fake_transport(batches=[[make_message("m1")]])
        consumer = Consumer(QUEUE_URL, handler, consumer_config(transport, receivers=2))

        consumer.start()
        try:
            await eventually(lambda: received)
            await asyncio.sleep(0.05)
        finally:
            await consumer.stop()

        assert received == ["m1"]

    @pytest.mark.asyncio
    async def test_delivery_after_transport_errors(
        self, fake_transport, consumer_config, make_message, client_error, eventually
    ):
        """Test receive failures do not stop eventual delivery."""
        received = []
        transport = fake_transport(
            batches=[[make_message("m1")]],
            failures=[client_error() for _ in range(5)]
        )
        consumer = Consumer(
            QUEUE_URL,
            lambda m: received.append(m.message_id),
            consumer_config(transport)
        )

        consumer.start()
        try:
            await eventually(lambda: received)
        finally:
            await consumer.stop()

        assert received == ["m1"]

    @pytest.mark.asyncio
    async def test_messages_not_deleted_after_handling(
        self, fake_transport, consumer_config, make_message, eventually
    ):
        """Test the consumer leaves acknowledgment to the handler."""
        received = []
        transport = fake_transport(batches=[[make_message("m1")]])
        consumer = Consumer(
            QUEUE_URL,
            lambda m: received.append(m.message_id),
            consumer_config(transport)
        )

        consumer.start()
        try:
            await eventually(lambda: received)
        finally:
            await consumer.stop()

        assert transport.deleted == []

    @pytest.mark.asyncio
    async def test_handler_errors_reported_to_hook(
        self, fake_transport, consumer_config, make_message, eventually
    ):
        """Test the error hook sees handler failures from the running consumer."""
        failures = []

        def handler(message):
            raise RuntimeError("downstream unavailable")

        transport = fake_transport(batches=[[make_message("m1")]])
        consumer = Consumer(
            QUEUE_URL,
            handler,
            consumer_config(transport),
            on_handler_error=lambda m, e: failures.append((m.message_id, str(e)))
        )

        consumer.start()
        try:
            await eventually(lambda: failures)
        finally:
            await consumer.stop()

        assert failures == [("m1", "downstream unavailable")]


class TestSetPollDelay:
    """Test cases for live poll delay changes."""

    @pytest.mark.asyncio
    async def test_set_poll_delay_applies_to_running_receivers(
        self, fake_transport, consumer_config, eventually
    ):
        """Test a larger delay slows polling without restarting the loops."""
        transport = fake_transport()
        consumer = Consumer(QUEUE_URL, lambda m: None, consumer_config(transport, receivers=2))

        consumer.start()
        try:
            await eventually(lambda: len(transport.receive_calls) >= 4)
            tasks_before = list(consumer._receiver_tasks)

            consumer.set_poll_delay(10_000)
            await asyncio.sleep(0.05)
            calls = len(transport.receive_calls)
            await asyncio.sleep(0.1)

            assert len(transport.receive_calls) == calls
            assert consumer.receiver.poll_delay_ms == 10_000
            assert consumer._receiver_tasks == tasks_before
            assert consumer.receiver_count == 2
        finally:
            await consumer.stop()

    def test_negative_delay_rejected(self, fake_transport, consumer_config):
        """Test negative delays are refused."""
        consumer = Consumer(QUEUE_URL, lambda m: None, consumer_config(fake_transport()))

        with pytest.raises(ValueError, match="delay_ms must be a non-negative integer"):
            consumer.set_poll_delay(-1)

    @pytest.mark.parametrize("value", [True, False, 1.5, "100"])
    def test_non_integer_delay_rejected(self, fake_transport, consumer_config, value):
        """Test booleans and other non-int values are refused."""
        consumer = Consumer(QUEUE_URL, lambda m: None, consumer_config(fake_transport()))

        with pytest.raises(ValueError, match="delay_ms must be a non-negative integer"):
            consumer.set_poll_delay(value)

        assert consumer.receiver.poll_delay_ms == 1
