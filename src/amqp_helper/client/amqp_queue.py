"""Queue facade over a blocking RabbitMQ connection."""

from __future__ import annotations

import logging
import threading
from collections import deque
from types import TracebackType
from typing import Callable, Deque, Iterator, List, Optional, Type, Union

import pika
from pika.adapters.blocking_connection import BlockingChannel

from amqp_helper.config import Configuration
from amqp_helper.connection import RabbitMQConnection
from amqp_helper.contracts import IRabbitMQConnection
from amqp_helper.errors import QueueAlreadyConnectedError, QueueNotInitializedError
from amqp_helper.message import Message

MessageCallback = Callable[[Message], None]


class Queue:
    """Declares one queue and publishes to / consumes from it.

    The queue owns a single connection and channel. ``pika`` blocking
    connections are not thread-safe: while a worker started by
    ``process_incoming_messages`` is running it drives the connection, and
    callers must serialize ``publish`` and ``recover`` with it themselves.
    """

    def __init__(
        self,
        config: Configuration,
        *,
        connection: Optional[IRabbitMQConnection] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.config = config
        self.connection = connection or RabbitMQConnection(config.host)
        self.channel: Optional[BlockingChannel] = None
        self.queue_name: Optional[str] = None
        self.connected = False
        self.worker: Optional[MessageCallback] = None
        self._workers: List[threading.Thread] = []
        self._worker_errors: List[BaseException] = []
        self._lock = threading.Lock()
        self._stopping = threading.Event()

    def connect(self) -> Queue:
        """Dial the broker, open a channel and declare the configured queue."""
        if self.connected:
            raise QueueAlreadyConnectedError(self.connection.url)

        self._stopping.clear()
        try:
            self.connection.dial()
            self.connected = True
            self.channel = self._open_channel()
            self._declare()
        except Exception:
            self.logger.error("Failed to set up queue %s", self.config.routing_key)
            self._release()
            raise

        return self

    def publish(
        self,
        body: Union[bytes, str],
        mandatory: bool = False,
        immediate: bool = False,
    ) -> None:
        channel = self._require_channel()
        if immediate:
            self.logger.warning("Immediate delivery is not supported by the broker; flag ignored")
        if isinstance(body, str):
            body = body.encode("utf-8")

        channel.basic_publish(
            exchange=self.config.exchange,
            routing_key=self.config.routing_key,
            body=body,
            properties=pika.BasicProperties(content_type=self.config.content_type),
            mandatory=mandatory,
        )
        self.logger.debug(
            "Published %d bytes to exchange=%r routing_key=%r",
            len(body),
            self.config.exchange,
            self.config.routing_key,
        )

    def get_consumer(self, consumer_id: str) -> Iterator[Message]:
        """Register a consumer and return its feed of deliveries.

        The feed yields messages in the order the broker delivered them and ends
        when the consumer is cancelled, the channel closes, or the queue is closed.
        Iterating it drives the connection's I/O.
        """
        channel = self._require_channel()
        pending: Deque[Message] = deque()

        def on_message(
            ch: BlockingChannel,
            method: pika.spec.Basic.Deliver,
            properties: pika.spec.BasicProperties,
            body: bytes,
        ) -> None:
            pending.append(Message(channel=ch, method=method, properties=properties, body=body))

        consumer_tag = channel.basic_consume(
            queue=self.queue_name,
            on_message_callback=on_message,
            auto_ack=self.config.auto_acknowledge_messages,
            exclusive=self.config.exclusive,
            consumer_tag=consumer_id or None,
            arguments=dict(self.config.arguments) or None,
        )
        self.logger.info("Registered consumer %s on %s", consumer_tag, self.queue_name)
        return self._feed(channel, consumer_tag, pending)

    def process_incoming_messages(self, consumer_id: str, callback: MessageCallback) -> None:
        """Start a background worker passing each delivery to ``callback``.

        Call ``wait`` to block until the worker finishes.
        """
        feed = self.get_consumer(consumer_id)
        self.worker = callback

        worker = threading.Thread(
            target=self._process,
            args=(consumer_id, feed, callback),
            name=f"amqp-consumer-{consumer_id}",
            daemon=True,
        )
        with self._lock:
            self._workers.append(worker)
        worker.start()

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until every consumer worker has finished.

        Re-raises the first error that stopped a worker.
        """
        with self._lock:
            workers = list(self._workers)

        for worker in workers:
            if worker is threading.current_thread():
                continue
            worker.join(timeout)

        with self._lock:
            self._workers = [worker for worker in self._workers if worker.is_alive()]
            errors, self._worker_errors = self._worker_errors, []

        if errors:
            raise errors[0]

    def recover(self) -> None:
        """Re-establish the connection if it was closed, reopen the channel and redeclare."""
        self._stopping.clear()
        if self.connection.is_closed:
            self.logger.info("Connection to %s was closed, reconnecting", self.connection.url)
            try:
                self.connection.dial()
            except Exception:
                self.logger.error("Error establishing connection")
                self.connected = False
                raise
        self.connected = True

        try:
            self.channel = self._open_channel()
        except Exception:
            self.logger.error("Error reopening channel")
            raise

        try:
            self._declare()
        except Exception:
            self.logger.error("Error declaring queue %s", self.config.routing_key)
            raise

        self.logger.info("Recovered queue %s", self.queue_name)

    def close(self) -> None:
        """Stop consumer workers and release the channel and connection."""
        self._stopping.set()
        with self._lock:
            workers = list(self._workers)
        for worker in workers:
            if worker is not threading.current_thread():
                worker.join()
        with self._lock:
            self._workers = [worker for worker in self._workers if worker.is_alive()]

        self._release()
        self.logger.info("Closed queue %s", self.config.routing_key)

    def __enter__(self) -> Queue:
        if not self.connected:
            self.connect()
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def _open_channel(self) -> BlockingChannel:
        channel = self.connection.open_channel()
        if self.config.prefetch_count is not None:
            channel.basic_qos(prefetch_count=self.config.prefetch_count)
        return channel

    def _declare(self) -> None:
        channel = self._require_channel()
        if self.config.no_wait or self.config.no_local:
            self.logger.warning("no_wait and no_local are not supported by the blocking client; flags ignored")

        frame = channel.queue_declare(
            queue=self.config.routing_key,
            durable=self.config.durable,
            exclusive=self.config.exclusive,
            auto_delete=self.config.delete_if_unused,
            arguments=dict(self.config.arguments) or None,
        )
        self.queue_name = frame.method.queue
        self.logger.info("Declared queue %s", self.queue_name)

        if self.config.exchange:
            channel.queue_bind(
                queue=self.queue_name,
                exchange=self.config.exchange,
                routing_key=self.config.routing_key or self.queue_name,
            )
            self.logger.info("Bound queue %s to exchange %s", self.queue_name, self.config.exchange)

    def _require_channel(self) -> BlockingChannel:
        if self.channel is None or not self.connected:
            raise QueueNotInitializedError()
        return self.channel

    def _feed(
        self,
        channel: BlockingChannel,
        consumer_tag: str,
        pending: Deque[Message],
    ) -> Iterator[Message]:
        while True:
            while pending:
                yield pending.popleft()
            if self._stopping.is_set() or not channel.is_open or consumer_tag not in channel.consumer_tags:
                return
            self.connection.process_data_events(time_limit=self.config.poll_interval)

    def _process(self, consumer_id: str, feed: Iterator[Message], callback: MessageCallback) -> None:
        self.logger.info("Consumer %s started", consumer_id)
        try:
            for message in feed:
                self.logger.debug("Consumer %s received delivery %s", consumer_id, message.delivery_tag)
                callback(message)
        except Exception as exc:
            self.logger.error("Consumer %s stopped on error: %s", consumer_id, exc, exc_info=True)
            with self._lock:
                self._worker_errors.append(exc)
        finally:
            self.logger.info("Consumer %s finished", consumer_id)

    def _release(self) -> None:
        self.connection.close()
        self.channel = None
        self.connected = False


def get_queue(config: Configuration, *, connection: Optional[IRabbitMQConnection] = None) -> Queue:
    """Build a queue from ``config`` and connect it."""
    return Queue(config, connection=connection).connect()
