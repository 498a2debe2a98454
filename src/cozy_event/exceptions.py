"""Domain exception hierarchy for cozy_event consumers.

The bus itself never raises these: they belong to the validation done by the
registry, provider and subscription layers.
"""

from __future__ import annotations


class CozyEventError(RuntimeError):
    """Base class for all cozy_event errors."""


class InvalidEventNameError(CozyEventError, ValueError):
    """Raised when an event name is not a non-blank string."""


class InvalidHandlerError(CozyEventError, TypeError):
    """Raised when a handler or callback is not callable."""


class InvalidBusInstanceError(CozyEventError, TypeError):
    """Raised when an object that is not an EventBus is supplied as one."""


class InvalidInstanceIdError(CozyEventError, ValueError):
    """Raised when a registry identifier is not a non-blank string."""


class InstanceNotFoundError(CozyEventError, LookupError):
    """Raised when no bus is registered under the requested identifier."""


class ConfigValidationError(CozyEventError):
    """Raised when configuration cannot be validated safely."""
