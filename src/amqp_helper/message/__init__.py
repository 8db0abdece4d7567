"""Delivered message wrapper."""

from .amqp_message import Message

__all__ = [
    "Message",
]
