"""Defines the contract for RabbitMQ connections."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Optional, Type

from pika.adapters.blocking_connection import BlockingChannel


class IRabbitMQConnection(ABC):
    """Represents a RabbitMQ connection capable of producing blocking channels."""

    url: str

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """True when no usable broker connection is held."""

    @abstractmethod
    def dial(self) -> None:
        """Open the broker connection if it is not already open."""

    @abstractmethod
    def open_channel(self) -> BlockingChannel:
        """Return an open channel, opening a new one when the current one is closed."""

    @abstractmethod
    def connect(self) -> BlockingChannel:
        """Dial when needed and return an open blocking channel."""

    @abstractmethod
    def process_data_events(self, time_limit: Optional[float] = 0) -> None:
        """Drive connection I/O, dispatching pending deliveries to consumers."""

    @abstractmethod
    def close(self) -> None:
        """Close the channel and connection."""

    @abstractmethod
    def __enter__(self) -> IRabbitMQConnection:
        """Enter a managed connection context."""

    @abstractmethod
    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Exit a managed connection context."""
