"""Tests for the delivered message wrapper."""

import json
from unittest.mock import Mock

import pika
import pytest

from amqp_helper.message import Message


@pytest.fixture
def channel():
    return Mock()


def make_message(channel, body=b"payload", **properties):
    method = pika.spec.Basic.Deliver(
        consumer_tag="worker-1",
        delivery_tag=7,
        redelivered=True,
        exchange="events",
        routing_key="orders",
    )
    return Message(
        channel=channel,
        method=method,
        properties=pika.BasicProperties(**properties),
        body=body,
    )


def test_exposes_delivery_metadata(channel):
    message = make_message(
        channel,
        content_type="application/json",
        correlation_id="cid",
        reply_to="reply.queue",
        headers={"attempt": 2},
    )

    assert message.delivery_tag == 7
    assert message.routing_key == "orders"
    assert message.exchange == "events"
    assert message.redelivered is True
    assert message.consumer_tag == "worker-1"
    assert message.content_type == "application/json"
    assert message.correlation_id == "cid"
    assert message.reply_to == "reply.queue"
    assert message.headers == {"attempt": 2}


def test_headers_default_to_empty(channel):
    assert make_message(channel).headers == {}


def test_text_and_json(channel):
    message = make_message(channel, body=json.dumps({"id": 1}).encode("utf-8"))

    assert message.text() == '{"id": 1}'
    assert message.json() == {"id": 1}


def test_json_raises_on_malformed_body(channel):
    with pytest.raises(json.JSONDecodeError):
        make_message(channel, body=b"not json").json()


def test_ack_uses_delivery_tag(channel):
    make_message(channel).ack()

    channel.basic_ack.assert_called_once_with(delivery_tag=7, multiple=False)


def test_nack_and_reject_forward_requeue(channel):
    message = make_message(channel)

    message.nack(requeue=False)
    message.reject()

    channel.basic_nack.assert_called_once_with(delivery_tag=7, multiple=False, requeue=False)
    channel.basic_reject.assert_called_once_with(delivery_tag=7, requeue=True)
