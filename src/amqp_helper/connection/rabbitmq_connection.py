"""RabbitMQ connection management."""

from __future__ import annotations

import logging
import os
from types import TracebackType
from typing import Optional, Type

import pika
from pika.adapters.blocking_connection import BlockingChannel, BlockingConnection
from pika.connection import Parameters

from amqp_helper.contracts import IRabbitMQConnection

RABBITMQ_URL_ENV = "RABBITMQ_URL"


class RabbitMQConnection(IRabbitMQConnection):
    """Manages lifecycle of a blocking RabbitMQ connection and its single channel."""

    def __init__(
        self,
        rabbitmq_url: Optional[str] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        url = (rabbitmq_url or os.getenv(RABBITMQ_URL_ENV) or "").strip()
        if not url:
            raise ValueError(
                f"RabbitMQ URL must be provided via argument or {RABBITMQ_URL_ENV} environment variable."
            )

        try:
            self._parameters: Parameters = pika.URLParameters(url)
        except ValueError as exc:
            raise ValueError(f"Invalid RabbitMQ URL provided: {url}") from exc

        self.url = url
        self.connection: Optional[BlockingConnection] = None
        self.channel: Optional[BlockingChannel] = None
        self.logger = logger or logging.getLogger(__name__)

    @property
    def is_closed(self) -> bool:
        return self.connection is None or bool(self.connection.is_closed)

    def dial(self) -> None:
        if not self.is_closed:
            return

        self.logger.info("Connecting to RabbitMQ at %s", self.url)
        try:
            self.connection = pika.BlockingConnection(self._parameters)
        except pika.exceptions.AMQPConnectionError as exc:
            self.logger.error("Failed to establish RabbitMQ connection: %s", exc)
            raise

        # a fresh connection invalidates any channel of the previous one
        self.channel = None
        self.logger.info("Connected to RabbitMQ.")

    def open_channel(self) -> BlockingChannel:
        if self.connection is None or self.connection.is_closed:
            raise pika.exceptions.ConnectionWrongStateError("No connection to queue")

        if self.channel is None or self.channel.is_closed:
            self.logger.debug("Opening channel for RabbitMQ connection.")
            self.channel = self.connection.channel()

        return self.channel

    def connect(self) -> BlockingChannel:
        self.dial()
        return self.open_channel()

    def process_data_events(self, time_limit: Optional[float] = 0) -> None:
        if self.connection is None:
            raise pika.exceptions.ConnectionWrongStateError("No connection to queue")
        self.connection.process_data_events(time_limit=time_limit)

    def close(self) -> None:
        if self.channel and not self.channel.is_closed:
            self.channel.close()
            self.logger.info("Closed RabbitMQ channel.")

        if self.connection and not self.connection.is_closed:
            self.connection.close()
            self.logger.info("Closed RabbitMQ connection.")

    def __enter__(self) -> RabbitMQConnection:
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()
