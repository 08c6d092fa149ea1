"""Typed publish/subscribe topics for pipeline output.

Each notification kind has its own `Topic[T]`, so a handler's payload type is
fixed per topic instead of one untyped callback signature for everything.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from tmfind.core.models import DecodedTransaction

T = TypeVar("T")


class Topic(Generic[T]):
    """Ordered list of handlers for one payload type.

    Handler exceptions propagate to the publisher.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._handlers: list[Callable[[T], None]] = []

    def subscribe(self, handler: Callable[[T], None]) -> Callable[[T], None]:
        """Register `handler`; returns it so this also works as a decorator."""
        self._handlers.append(handler)
        return handler

    def unsubscribe(self, handler: Callable[[T], None]) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def publish(self, payload: T) -> int:
        """Call every handler with `payload`; returns how many were called."""
        handlers = list(self._handlers)
        for h in handlers:
            h(payload)
        return len(handlers)

    def __len__(self) -> int:
        return len(self._handlers)


@dataclass(slots=True, frozen=True)
class ReconnectAttempt:
    attempt: int
    max_attempts: int


def _topic(name: str) -> Any:
    return field(default_factory=lambda: Topic(name))


@dataclass
class Dispatcher:
    """All topics a pipeline (and its transport shell) publishes to."""

    message: Topic[dict[str, Any]] = _topic("message")
    subscription_confirmed: Topic[dict[str, Any]] = _topic("subscription_confirmed")
    tx: Topic[DecodedTransaction] = _topic("tx")
    filtered_tx: Topic[DecodedTransaction] = _topic("filtered_tx")
    wasm_tx: Topic[DecodedTransaction] = _topic("wasm_tx")
    wallet_tx: Topic[DecodedTransaction] = _topic("wallet_tx")
    staking_tx: Topic[DecodedTransaction] = _topic("staking_tx")
    error: Topic[Exception] = _topic("error")
    connected: Topic[str] = _topic("connected")
    disconnected: Topic[str] = _topic("disconnected")
    reconnecting: Topic[ReconnectAttempt] = _topic("reconnecting")
