"""Process-wide registry of named buses and the shared default bus.

Both pieces of state are explicit module globals: the default bus is created
on first use by :func:`get_default_bus`, and named buses stay registered until
:func:`unregister_instance` removes them.
"""

from __future__ import annotations

import logging
from typing import Any

from .bus import EventBus
from .exceptions import (
    InstanceNotFoundError,
    InvalidBusInstanceError,
    InvalidInstanceIdError,
)

LOGGER = logging.getLogger(__name__)

_instances: dict[str, EventBus] = {}
_default_bus: EventBus | None = None


def ensure_bus(instance: Any) -> EventBus:
    """Return ``instance`` unchanged if it is an EventBus, else raise."""
    if not isinstance(instance, EventBus):
        raise InvalidBusInstanceError(
            f"Invalid EventBus instance: {type(instance).__name__}"
        )
    return instance


def validate_instance_id(instance_id: Any) -> str:
    if not isinstance(instance_id, str) or not instance_id.strip():
        raise InvalidInstanceIdError("Instance id must be a non-empty string.")
    return instance_id


def register_instance(instance_id: str, bus: EventBus) -> None:
    """Register ``bus`` under ``instance_id``, replacing any previous entry."""
    validate_instance_id(instance_id)
    ensure_bus(bus)
    previous = _instances.get(instance_id)
    if previous is not None and previous is not bus:
        LOGGER.warning(
            "registry.instance.replaced",
            extra={"event": "registry.instance.replaced", "instance_id": instance_id},
        )
    _instances[instance_id] = bus
    LOGGER.debug(
        "registry.instance.registered",
        extra={"event": "registry.instance.registered", "instance_id": instance_id},
    )


def unregister_instance(
    instance_id: str, bus: EventBus | None = None
) -> EventBus | None:
    """Remove and return the bus registered under ``instance_id``.

    When ``bus`` is given, the entry is only removed if it still points at that
    bus, so tearing down an outer owner does not drop a newer registration.
    """
    current = _instances.get(instance_id)
    if current is None or (bus is not None and current is not bus):
        return None
    del _instances[instance_id]
    LOGGER.debug(
        "registry.instance.unregistered",
        extra={"event": "registry.instance.unregistered", "instance_id": instance_id},
    )
    return current


def get_instance(instance_id: str) -> EventBus | None:
    return _instances.get(instance_id)


def resolve_instance(instance_id: str) -> EventBus:
    """Return the bus registered under ``instance_id`` or raise."""
    bus = _instances.get(instance_id)
    if bus is None:
        raise InstanceNotFoundError(
            f"No EventBus instance registered with id {instance_id!r}."
        )
    return bus


def registered_ids() -> list[str]:
    return list(_instances)


def clear_registry() -> None:
    """Forget every named bus without destroying them."""
    _instances.clear()


def get_default_bus() -> EventBus:
    """Return the shared default bus, creating it on first use.

    A destroyed default bus is replaced by a fresh one.
    """
    global _default_bus
    if _default_bus is None or _default_bus.destroyed:
        _default_bus = EventBus()
        LOGGER.debug("registry.default.created", extra={"event": "registry.default.created"})
    return _default_bus


def reset_default_bus() -> None:
    """Destroy the shared default bus; the next lookup creates a new one."""
    global _default_bus
    if _default_bus is not None:
        _default_bus.destroy()
        _default_bus = None
