"""Top-level package for cozyevent."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .bus import EventBus
from .reactive import ReactiveProxy, observe, unwrap
from .scheduler import DeferredQueue

if TYPE_CHECKING:
    from .config import load_config
    from .exceptions import (
        ConfigValidationError,
        CozyEventError,
        InstanceNotFoundError,
        InvalidBusInstanceError,
        InvalidEventNameError,
        InvalidHandlerError,
        InvalidInstanceIdError,
    )
    from .provider import EventBusProvider, current_bus
    from .registry import (
        get_default_bus,
        get_instance,
        register_instance,
        resolve_instance,
        unregister_instance,
    )
    from .subscription import Subscription, resolve_bus, subscribe

__all__ = [
    "ConfigValidationError",
    "CozyEventError",
    "DeferredQueue",
    "EventBus",
    "EventBusProvider",
    "InstanceNotFoundError",
    "InvalidBusInstanceError",
    "InvalidEventNameError",
    "InvalidHandlerError",
    "InvalidInstanceIdError",
    "ReactiveProxy",
    "Subscription",
    "current_bus",
    "get_default_bus",
    "get_instance",
    "load_config",
    "observe",
    "register_instance",
    "resolve_bus",
    "resolve_instance",
    "subscribe",
    "unregister_instance",
    "unwrap",
]

_EXCEPTIONS = {
    "ConfigValidationError",
    "CozyEventError",
    "InstanceNotFoundError",
    "InvalidBusInstanceError",
    "InvalidEventNameError",
    "InvalidHandlerError",
    "InvalidInstanceIdError",
}
_REGISTRY = {
    "get_default_bus",
    "get_instance",
    "register_instance",
    "resolve_instance",
    "unregister_instance",
}


def __getattr__(name: str) -> Any:
    """Lazily import the glue layers so ``import cozy_event`` stays light."""
    if name == "load_config":
        from .config import load_config

        return load_config
    if name in _EXCEPTIONS:
        from . import exceptions

        return getattr(exceptions, name)
    if name in _REGISTRY:
        from . import registry

        return getattr(registry, name)
    if name in {"EventBusProvider", "current_bus"}:
        from . import provider

        return getattr(provider, name)
    if name in {"Subscription", "resolve_bus", "subscribe"}:
        from . import subscription

        return getattr(subscription, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
