"""In-process publish/subscribe event bus.

Usage:
    bus = EventBus()

    def on_login(user):
        print(f"Logged in: {user}")

    bus.on("user.login", on_login)
    bus.emit("user.login", "luke")

    # Delivered once the current synchronous unit of work has unwound.
    bus.emit_deferred("user.login", "leia")
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
import logging
from typing import Any, Literal

from .reactive import ReactiveProxy
from .scheduler import DeferredQueue

LOGGER = logging.getLogger(__name__)

Handler = Callable[..., Any]
DispatchMode = Literal["sync", "deferred"]

DEFAULT_OBSERVE_PREFIX = "observe:"

_EMPTY: Any = object()


class EventBus:
    """Lightweight event emitter with immediate and deferred delivery.

    Each event name maps to either a single handler or, once a second handler
    is registered, a list of handlers in insertion order.  Lists are only ever
    appended to in place; removals build a new list.  A dispatch in progress
    therefore keeps iterating the handlers it started with.

    The bus raises nothing for its own bookkeeping: unknown events, redundant
    removals and calls made after :meth:`destroy` are silent no-ops.  Handler
    exceptions are not caught.
    """

    def __init__(
        self,
        deferred: bool = False,
        *,
        queue: DeferredQueue | None = None,
        observe_prefix: str = DEFAULT_OBSERVE_PREFIX,
    ) -> None:
        self._events: dict[Hashable, Handler | list[Handler]] = {}
        self._destroyed = False
        self._deferred = deferred
        self._queue = queue if queue is not None else DeferredQueue()
        self.observe_prefix = observe_prefix

    @classmethod
    def from_config(
        cls, config: dict[str, Any], *, queue: DeferredQueue | None = None
    ) -> EventBus:
        """Build a bus from a loaded config dict or its ``bus`` section."""
        bus_config = config.get("bus", config)
        return cls(
            deferred=bus_config.get("default_mode", "sync") == "deferred",
            queue=queue,
            observe_prefix=bus_config.get("observe_prefix", DEFAULT_OBSERVE_PREFIX),
        )

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def default_mode(self) -> DispatchMode:
        return "deferred" if self._deferred else "sync"

    @property
    def queue(self) -> DeferredQueue:
        """Queue used for deferred delivery."""
        return self._queue

    def on(self, event_name: Hashable, handler: Handler) -> None:
        """Register ``handler`` to run every time ``event_name`` is emitted.

        The same handler registered twice is called twice per emission.
        """
        if self._destroyed:
            LOGGER.debug(
                "bus.on.ignored",
                extra={"event": "bus.on.ignored", "event_name": event_name},
            )
            return
        current = self._events.get(event_name, _EMPTY)
        if current is _EMPTY:
            self._events[event_name] = handler
        elif type(current) is list:
            current.append(handler)
        else:
            self._events[event_name] = [current, handler]

    def once(self, event_name: Hashable, handler: Handler) -> Handler:
        """Register ``handler`` for the next delivery of ``event_name`` only.

        Returns the internal wrapper so it can be passed to :meth:`off`.
        The wrapper unregisters itself before calling ``handler``, so a
        handler that re-emits the same event is not triggered again.
        """
        fired = False

        def once_wrapper(*args: Any, **kwargs: Any) -> Any:
            nonlocal fired
            # A deferred snapshot may still hold the wrapper after removal.
            if fired:
                return None
            fired = True
            self.off(event_name, once_wrapper)
            return handler(*args, **kwargs)

        self.on(event_name, once_wrapper)
        return once_wrapper

    def off(self, event_name: Hashable, handler: Handler | None = None) -> None:
        """Remove ``handler`` from ``event_name``, or every handler when omitted.

        Handlers are matched with ``==``, which is identity for plain functions
        and lets bound methods be removed with a fresh ``obj.method`` reference.
        """
        current = self._events.get(event_name, _EMPTY)
        if current is _EMPTY:
            return
        if handler is None:
            del self._events[event_name]
            return
        if type(current) is list:
            remaining = [registered for registered in current if registered != handler]
            if len(remaining) == len(current):
                return
            if not remaining:
                del self._events[event_name]
            elif len(remaining) == 1:
                self._events[event_name] = remaining[0]
            else:
                self._events[event_name] = remaining
        elif current == handler:
            del self._events[event_name]

    def emit(self, event_name: Hashable, *args: Any, **kwargs: Any) -> None:
        """Deliver using the bus's default mode."""
        if self._deferred:
            self.emit_deferred(event_name, *args, **kwargs)
        else:
            self.emit_sync(event_name, *args, **kwargs)

    def emit_sync(self, event_name: Hashable, *args: Any, **kwargs: Any) -> None:
        """Call every handler for ``event_name`` before returning."""
        handlers = self._events.get(event_name)
        if handlers is None:
            return
        if type(handlers) is not list:
            handlers(*args, **kwargs)
            return

        count = len(handlers)
        index = 0
        stop = count - (count & 3)
        while index < stop:
            handlers[index](*args, **kwargs)
            handlers[index + 1](*args, **kwargs)
            handlers[index + 2](*args, **kwargs)
            handlers[index + 3](*args, **kwargs)
            index += 4
        while index < count:
            handlers[index](*args, **kwargs)
            index += 1

    def emit_deferred(self, event_name: Hashable, *args: Any, **kwargs: Any) -> None:
        """Schedule delivery to the handlers registered right now.

        The handler set is captured before this call returns; handlers added
        or removed afterwards do not change the scheduled batch.  Nothing is
        scheduled when the event has no handlers.
        """
        handlers = self._events.get(event_name)
        if handlers is None:
            return
        snapshot = tuple(handlers) if type(handlers) is list else (handlers,)
        self._queue.schedule(self._deliver, snapshot, args, kwargs)

    def _deliver(
        self,
        snapshot: tuple[Handler, ...],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> None:
        if self._destroyed:
            return
        for handler in snapshot:
            handler(*args, **kwargs)

    def flush(self) -> int:
        """Run deferred batches queued while no event loop was running."""
        return self._queue.flush()

    def remove_all_listeners(self, event_name: Hashable | None = None) -> None:
        """Remove every handler for ``event_name``, or for all events when omitted."""
        if event_name is not None:
            self.off(event_name)
            return
        count = len(self._events)
        self._events = {}
        LOGGER.debug(
            "bus.listeners.cleared",
            extra={"event": "bus.listeners.cleared", "event_count": count},
        )

    def destroy(self) -> None:
        """Drop all handlers and turn every later call into a no-op."""
        self.remove_all_listeners()
        self._destroyed = True
        LOGGER.debug("bus.destroyed", extra={"event": "bus.destroyed"})

    def listeners(self, event_name: Hashable) -> tuple[Handler, ...]:
        """Return the handlers for ``event_name`` in insertion order."""
        handlers = self._events.get(event_name, _EMPTY)
        if handlers is _EMPTY:
            return ()
        if type(handlers) is list:
            return tuple(handlers)
        return (handlers,)

    def listener_count(self, event_name: Hashable) -> int:
        handlers = self._events.get(event_name, _EMPTY)
        if handlers is _EMPTY:
            return 0
        return len(handlers) if type(handlers) is list else 1

    def event_names(self) -> list[Hashable]:
        """Return the names that currently have at least one handler."""
        return list(self._events)

    def observe(self, target: Any, callback: Callable[[Any, Any], Any]) -> ReactiveProxy:
        """Wrap ``target`` so changed writes call ``callback`` synchronously."""
        return ReactiveProxy(target, self, callback)

    def observe_deferred(
        self, target: Any, callback: Callable[[Any, Any], Any]
    ) -> ReactiveProxy:
        """Wrap ``target`` so changed writes schedule ``callback`` on the deferred queue."""
        return ReactiveProxy(target, self, callback, deferred=True)

    def __repr__(self) -> str:
        state = "destroyed" if self._destroyed else f"{len(self._events)} events"
        return f"<EventBus {self.default_mode} {state}>"
