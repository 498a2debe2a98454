"""Scope a bus to the code running inside a ``with`` block.

The active bus lives in a :class:`contextvars.ContextVar`, so it follows
asyncio tasks created inside the block and is restored when the block exits.
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from types import TracebackType
from typing import Any

from .bus import EventBus
from .exceptions import CozyEventError
from .registry import (
    ensure_bus,
    get_default_bus,
    register_instance,
    unregister_instance,
    validate_instance_id,
)

_current_bus: ContextVar[EventBus | None] = ContextVar(
    "cozy_event_current_bus", default=None
)


def current_bus() -> EventBus | None:
    """Return the bus bound by the nearest enclosing provider, if any."""
    return _current_bus.get()


class EventBusProvider:
    """Expose one bus to the enclosed code and optionally register it by id.

    Usage:
        with EventBusProvider(EventBus(), instance_id="chat") as bus:
            ...  # current_bus() is bus; resolve_instance("chat") is bus
    """

    def __init__(self, bus: Any = None, instance_id: str | None = None) -> None:
        self.bus = get_default_bus() if bus is None else ensure_bus(bus)
        if instance_id is not None:
            validate_instance_id(instance_id)
        self.instance_id = instance_id
        self._token: Token[EventBus | None] | None = None

    @property
    def active(self) -> bool:
        return self._token is not None

    def __enter__(self) -> EventBus:
        if self._token is not None:
            raise CozyEventError("EventBusProvider is already active.")
        self._token = _current_bus.set(self.bus)
        if self.instance_id is not None:
            register_instance(self.instance_id, self.bus)
        return self.bus

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._token is None:
            return
        if self.instance_id is not None:
            unregister_instance(self.instance_id, self.bus)
        _current_bus.reset(self._token)
        self._token = None

    async def __aenter__(self) -> EventBus:
        return self.__enter__()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.__exit__(exc_type, exc, tb)
