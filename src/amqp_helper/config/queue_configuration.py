"""Provides the queue, exchange and declaration settings used by ``Queue``."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_ENV_PREFIX = "AMQP_"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


@dataclass(frozen=True)
class Configuration:
    """Encapsulates AMQP connection, declaration and consumption options.

    ``routing_key`` doubles as the queue name: the queue is declared under it and
    messages are published with it. When ``exchange`` is set the declared queue is
    bound to that exchange with ``routing_key``; the default exchange needs no
    binding.

    ``host`` may be omitted, in which case the connection falls back to the
    ``RABBITMQ_URL`` environment variable.

    ``arguments`` is copied and exposed read-only, so later changes to the
    caller's dict do not reach the queue.
    """

    host: Optional[str] = None
    routing_key: str = ""
    content_type: str = DEFAULT_CONTENT_TYPE
    exchange: str = ""
    auto_acknowledge_messages: bool = False
    durable: bool = False
    delete_if_unused: bool = False
    exclusive: bool = False
    no_wait: bool = False
    no_local: bool = False
    arguments: Mapping[str, Any] = field(default_factory=dict)
    prefetch_count: Optional[int] = None
    poll_interval: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "arguments", MappingProxyType(dict(self.arguments)))
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.prefetch_count is not None and self.prefetch_count < 0:
            raise ValueError(f"prefetch_count must not be negative, got {self.prefetch_count}")

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_ENV_PREFIX,
        environ: Optional[Mapping[str, str]] = None,
    ) -> Configuration:
        env: Mapping[str, str] = os.environ if environ is None else environ

        def get(name: str) -> Optional[str]:
            return env.get(prefix + name)

        prefetch = get("PREFETCH_COUNT")
        poll_interval = get("POLL_INTERVAL")

        return cls(
            host=get("HOST") or None,
            routing_key=get("ROUTING_KEY") or "",
            content_type=get("CONTENT_TYPE") or DEFAULT_CONTENT_TYPE,
            exchange=get("EXCHANGE") or "",
            auto_acknowledge_messages=_parse_bool(prefix + "AUTO_ACK", get("AUTO_ACK")),
            durable=_parse_bool(prefix + "DURABLE", get("DURABLE")),
            delete_if_unused=_parse_bool(prefix + "DELETE_IF_UNUSED", get("DELETE_IF_UNUSED")),
            exclusive=_parse_bool(prefix + "EXCLUSIVE", get("EXCLUSIVE")),
            no_wait=_parse_bool(prefix + "NO_WAIT", get("NO_WAIT")),
            no_local=_parse_bool(prefix + "NO_LOCAL", get("NO_LOCAL")),
            prefetch_count=_parse_int(prefix + "PREFETCH_COUNT", prefetch) if prefetch else None,
            poll_interval=_parse_float(prefix + "POLL_INTERVAL", poll_interval) if poll_interval else 1.0,
        )


def _parse_bool(name: str, value: Optional[str]) -> bool:
    normalized = (value or "").strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"Invalid integer value for {name}: {value!r}") from exc


def _parse_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"Invalid number for {name}: {value!r}") from exc
