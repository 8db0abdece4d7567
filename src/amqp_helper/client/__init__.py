"""Queue facade for publishing and consuming."""

from .amqp_queue import MessageCallback, Queue, get_queue

__all__ = [
    "MessageCallback",
    "Queue",
    "get_queue",
]
