"""Pass-through wrapper for a single AMQP delivery."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import pika
from pika.adapters.blocking_connection import BlockingChannel


@dataclass(frozen=True)
class Message:
    """One delivery handed to a consumer callback.

    Acknowledgement helpers act on the channel the message was delivered on, so
    they must be called from the thread consuming that channel.
    """

    channel: BlockingChannel
    method: pika.spec.Basic.Deliver
    properties: pika.spec.BasicProperties
    body: bytes

    @property
    def delivery_tag(self) -> int:
        return self.method.delivery_tag

    @property
    def routing_key(self) -> str:
        return self.method.routing_key

    @property
    def exchange(self) -> str:
        return self.method.exchange

    @property
    def redelivered(self) -> bool:
        return bool(self.method.redelivered)

    @property
    def consumer_tag(self) -> str:
        return self.method.consumer_tag

    @property
    def content_type(self) -> Optional[str]:
        return self.properties.content_type

    @property
    def correlation_id(self) -> Optional[str]:
        return self.properties.correlation_id

    @property
    def reply_to(self) -> Optional[str]:
        return self.properties.reply_to

    @property
    def headers(self) -> Dict[str, Any]:
        return dict(self.properties.headers or {})

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding)

    def json(self) -> Any:
        """Decode the body as JSON; raises ``json.JSONDecodeError`` on malformed payloads."""
        return json.loads(self.body.decode("utf-8"))

    def ack(self, multiple: bool = False) -> None:
        self.channel.basic_ack(delivery_tag=self.delivery_tag, multiple=multiple)

    def nack(self, multiple: bool = False, requeue: bool = True) -> None:
        self.channel.basic_nack(delivery_tag=self.delivery_tag, multiple=multiple, requeue=requeue)

    def reject(self, requeue: bool = True) -> None:
        self.channel.basic_reject(delivery_tag=self.delivery_tag, requeue=requeue)
