"""Change-detecting proxies that forward writes into an EventBus."""

from __future__ import annotations

from collections.abc import Callable, Iterator, MutableMapping
from types import ModuleType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .bus import EventBus

_MISSING: Any = object()


def _is_observable(value: Any) -> bool:
    """Return True for members that should be wrapped on read."""
    if isinstance(value, MutableMapping):
        return True
    if isinstance(value, (type, ModuleType)) or callable(value):
        return False
    return hasattr(value, "__dict__")


def _unchanged(old: Any, new: Any) -> bool:
    """Same object, or equal primitives of the same type."""
    if old is new:
        return True
    if type(old) is not type(new) or _is_observable(old):
        return False
    try:
        return bool(old == new)
    except (TypeError, ValueError):
        # Array-like values whose comparison is not a plain bool.
        return False


class ReactiveProxy:
    """Proxy over a mapping or object that reports changed writes.

    Mapping targets are read and written by key, other objects by attribute.
    Both ``proxy.name`` and ``proxy["name"]`` go through :meth:`get` and
    :meth:`set`.  Nested mappings and plain objects are wrapped again on every
    read, so two reads of the same member give two distinct proxies over the
    same underlying value.

    The accessor names shadow target members called ``get`` or ``set``;
    reach those with item syntax (``proxy["get"]``) or :func:`unwrap`.
    """

    __slots__ = ("_target", "_bus", "_callback", "_deferred")

    def __init__(
        self,
        target: Any,
        bus: EventBus,
        callback: Callable[[Any, Any], Any],
        deferred: bool = False,
    ) -> None:
        object.__setattr__(self, "_target", target)
        object.__setattr__(self, "_bus", bus)
        object.__setattr__(self, "_callback", callback)
        object.__setattr__(self, "_deferred", deferred)

    def get(self, name: Any) -> Any:
        target = self._target
        if isinstance(target, MutableMapping):
            value = target[name]
        else:
            value = getattr(target, name)
        if _is_observable(value):
            return ReactiveProxy(value, self._bus, self._callback, self._deferred)
        return value

    def set(self, name: Any, value: Any) -> bool:
        """Write ``value`` and notify when it differs from the stored one.

        Always returns True; a write is never rejected.
        """
        if isinstance(value, ReactiveProxy):
            value = value._target
        target = self._target
        if isinstance(target, MutableMapping):
            old = target.get(name, _MISSING)
            target[name] = value
        else:
            old = getattr(target, name, _MISSING)
            setattr(target, name, value)

        if old is not _MISSING and _unchanged(old, value):
            return True

        bus = self._bus
        if self._deferred:
            bus.queue.schedule(self._callback, name, value)
        else:
            self._callback(name, value)
        bus.emit_sync(f"{bus.observe_prefix}{name}", value)
        return True

    def __getattr__(self, name: str) -> Any:
        # Private and dunder lookups must not reach the target (copy, pickle).
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self.get(name)
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name in ReactiveProxy.__slots__:
            object.__setattr__(self, name, value)
        else:
            self.set(name, value)

    def __getitem__(self, name: Any) -> Any:
        return self.get(name)

    def __setitem__(self, name: Any, value: Any) -> None:
        self.set(name, value)

    def __contains__(self, name: Any) -> bool:
        target = self._target
        if isinstance(target, MutableMapping):
            return name in target
        return hasattr(target, name)

    def __iter__(self) -> Iterator[Any]:
        target = self._target
        if isinstance(target, MutableMapping):
            return iter(target)
        return iter(vars(target))

    def __len__(self) -> int:
        target = self._target
        if isinstance(target, MutableMapping):
            return len(target)
        return len(vars(target))

    def __repr__(self) -> str:
        return f"ReactiveProxy({self._target!r})"


def observe(
    bus: EventBus,
    target: Any,
    callback: Callable[[Any, Any], Any],
    deferred: bool = False,
) -> ReactiveProxy:
    """Wrap ``target`` with change notifications routed through ``bus``."""
    return ReactiveProxy(target, bus, callback, deferred)


def unwrap(value: Any) -> Any:
    """Return the object behind a proxy, or ``value`` unchanged."""
    if isinstance(value, ReactiveProxy):
        return value._target
    return value
