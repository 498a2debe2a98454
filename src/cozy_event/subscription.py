"""Lifecycle-bound subscriptions against the resolved bus.

A :class:`Subscription` plays the part of a component hook: it validates its
inputs, picks a bus (registry id, then enclosing provider, then the default
bus), subscribes on entry and unsubscribes on exit.

Usage:
    def on_login(user):
        print(f"Logged in: {user}")

    with Subscription("login", on_login, namespace="user"):
        emit("login", "luke", namespace="user")
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
import logging
from types import TracebackType
from typing import Any

from .bus import EventBus
from .exceptions import InvalidEventNameError, InvalidHandlerError
from .provider import current_bus
from .registry import get_default_bus, resolve_instance

LOGGER = logging.getLogger(__name__)

NAMESPACE_SEPARATOR = ":"

_KEEP: Any = object()


def resolve_bus(instance_id: str | None = None) -> EventBus:
    """Pick the bus for a subscriber.

    An explicit ``instance_id`` must be registered; otherwise the nearest
    provider's bus is used, falling back to the shared default bus.
    """
    if instance_id is not None:
        return resolve_instance(instance_id)
    bus = current_bus()
    if bus is not None:
        return bus
    return get_default_bus()


def validate_event_name(event_name: Any) -> str:
    if not isinstance(event_name, str) or not event_name.strip():
        raise InvalidEventNameError("Event name must be a non-empty string.")
    return event_name


def validate_callback(callback: Any) -> Callable[..., Any]:
    if not callable(callback):
        raise InvalidHandlerError("Callback must be callable.")
    return callback


def full_event_name(event_name: str, namespace: str | None = None) -> str:
    """Return ``namespace:event_name``, or ``event_name`` without a namespace."""
    if namespace:
        return f"{namespace}{NAMESPACE_SEPARATOR}{event_name}"
    return event_name


class Subscription:
    """Keep ``callback`` registered on one event for the life of a scope."""

    def __init__(
        self,
        event_name: str,
        callback: Callable[..., Any],
        namespace: str | None = None,
        instance_id: str | None = None,
        once: bool = False,
    ) -> None:
        self.event_name = validate_event_name(event_name)
        self.callback = validate_callback(callback)
        self.namespace = namespace
        self.instance_id = instance_id
        self.once = once
        self._bus: EventBus | None = None
        self._bound_name: Hashable | None = None
        self._bound_callback: Callable[..., Any] | None = None
        self._registered: Callable[..., Any] | None = None

    @property
    def active(self) -> bool:
        return self._bus is not None

    @property
    def bus(self) -> EventBus | None:
        """Bus the subscription is currently registered on."""
        return self._bus

    @property
    def full_name(self) -> str:
        return full_event_name(self.event_name, self.namespace)

    def subscribe(self) -> EventBus:
        """Register on the resolved bus; a no-op when already active."""
        if self._bus is not None:
            return self._bus
        bus = resolve_bus(self.instance_id)
        name = self.full_name
        if self.once:
            registered = bus.once(name, self.callback)
        else:
            bus.on(name, self.callback)
            registered = self.callback
        self._bus = bus
        self._bound_name = name
        self._bound_callback = self.callback
        self._registered = registered
        LOGGER.debug(
            "subscription.subscribed",
            extra={"event": "subscription.subscribed", "event_name": name},
        )
        return bus

    def unsubscribe(self) -> None:
        if self._bus is None:
            return
        self._bus.off(self._bound_name, self._registered)
        LOGGER.debug(
            "subscription.unsubscribed",
            extra={"event": "subscription.unsubscribed", "event_name": self._bound_name},
        )
        self._bus = None
        self._bound_name = None
        self._bound_callback = None
        self._registered = None

    def update(
        self,
        event_name: str = _KEEP,
        callback: Callable[..., Any] = _KEEP,
        namespace: str | None = _KEEP,
        instance_id: str | None = _KEEP,
    ) -> bool:
        """Change the inputs and re-subscribe if the binding changed.

        Only a different resolved bus, full event name or callback identity
        triggers an ``off``/``on`` pair.  Returns True when that happened.
        """
        if event_name is not _KEEP:
            event_name = validate_event_name(event_name)
        if callback is not _KEEP:
            callback = validate_callback(callback)
        if instance_id is _KEEP:
            instance_id = self.instance_id

        # A failed lookup must leave every field untouched.
        bus = resolve_bus(instance_id) if self._bus is not None else None

        if event_name is not _KEEP:
            self.event_name = event_name
        if callback is not _KEEP:
            self.callback = callback
        if namespace is not _KEEP:
            self.namespace = namespace
        self.instance_id = instance_id
        if bus is None:
            return False

        if (
            bus is self._bus
            and self.full_name == self._bound_name
            and self.callback is self._bound_callback
        ):
            return False
        self.unsubscribe()
        self.subscribe()
        return True

    def __enter__(self) -> Subscription:
        self.subscribe()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.unsubscribe()


def subscribe(
    event_name: str,
    callback: Callable[..., Any],
    *,
    namespace: str | None = None,
    instance_id: str | None = None,
    once: bool = False,
) -> Subscription:
    """Create and activate a :class:`Subscription`."""
    subscription = Subscription(
        event_name, callback, namespace=namespace, instance_id=instance_id, once=once
    )
    subscription.subscribe()
    return subscription


def emit(
    event_name: str,
    *args: Any,
    namespace: str | None = None,
    instance_id: str | None = None,
    **kwargs: Any,
) -> None:
    """Emit on the resolved bus using its default delivery mode."""
    validate_event_name(event_name)
    bus = resolve_bus(instance_id)
    bus.emit(full_event_name(event_name, namespace), *args, **kwargs)


def emit_deferred(
    event_name: str,
    *args: Any,
    namespace: str | None = None,
    instance_id: str | None = None,
    **kwargs: Any,
) -> None:
    """Schedule a deferred emission on the resolved bus."""
    validate_event_name(event_name)
    bus = resolve_bus(instance_id)
    bus.emit_deferred(full_event_name(event_name, namespace), *args, **kwargs)
