"""Contract interfaces for amqp-helper."""

from .rabbitmq_connection_interface import IRabbitMQConnection

__all__ = [
    "IRabbitMQConnection",
]
