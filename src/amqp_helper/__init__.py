"""Convenience layer over pika: configure a connection, declare a queue, publish and consume."""

from .client import MessageCallback, Queue, get_queue
from .config import Configuration
from .connection import RabbitMQConnection
from .contracts import IRabbitMQConnection
from .errors import AMQPHelperError, QueueAlreadyConnectedError, QueueNotInitializedError
from .message import Message

__all__ = [
    "AMQPHelperError",
    "Configuration",
    "IRabbitMQConnection",
    "Message",
    "MessageCallback",
    "Queue",
    "QueueAlreadyConnectedError",
    "QueueNotInitializedError",
    "RabbitMQConnection",
    "get_queue",
]
