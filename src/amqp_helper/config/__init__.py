"""Queue configuration for amqp-helper."""

from .queue_configuration import DEFAULT_CONTENT_TYPE, DEFAULT_ENV_PREFIX, Configuration

__all__ = [
    "Configuration",
    "DEFAULT_CONTENT_TYPE",
    "DEFAULT_ENV_PREFIX",
]
