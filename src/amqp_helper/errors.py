"""Local error conditions raised by amqp-helper.

Everything else raised by this package comes straight from ``pika``.
"""

from __future__ import annotations

from typing import Optional


class AMQPHelperError(Exception):
    """Base class for errors raised by the queue facade itself."""


class QueueNotInitializedError(AMQPHelperError):
    """Raised when a queue is used before a channel has been opened."""

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or "Queue has not been initialized"
        super().__init__(self.message)


class QueueAlreadyConnectedError(AMQPHelperError):
    """Raised when ``connect`` is called on a queue that is already connected."""

    def __init__(self, host: str, message: Optional[str] = None) -> None:
        self.host = host
        self.message = message or f"Queue is already connected to {host}"
        super().__init__(self.message)
