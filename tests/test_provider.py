"""Tests for scoping a bus with EventBusProvider."""

from __future__ import annotations

import asyncio
import unittest

from cozy_event import registry
from cozy_event.bus import EventBus
from cozy_event.exceptions import CozyEventError, InvalidBusInstanceError
from cozy_event.provider import EventBusProvider, current_bus


class ProviderTests(unittest.TestCase):
    """Validate provider binding and validation."""

    def tearDown(self) -> None:
        registry.clear_registry()
        registry.reset_default_bus()

    def test_provider_binds_custom_instance(self) -> None:
        custom = EventBus()
        self.assertIsNone(current_bus())
        with EventBusProvider(custom) as bus:
            self.assertIs(bus, custom)
            self.assertIs(current_bus(), custom)
        self.assertIsNone(current_bus())

    def test_provider_defaults_to_global_bus(self) -> None:
        with EventBusProvider() as bus:
            self.assertIs(bus, registry.get_default_bus())

    def test_provider_rejects_invalid_instances(self) -> None:
        for invalid in ({}, 123, "bus", object()):
            with self.subTest(invalid=invalid):
                with self.assertRaises(InvalidBusInstanceError):
                    EventBusProvider(invalid)

    def test_nested_providers_restore_outer_binding(self) -> None:
        outer, inner = EventBus(), EventBus()
        with EventBusProvider(outer):
            with EventBusProvider(inner):
                self.assertIs(current_bus(), inner)
            self.assertIs(current_bus(), outer)

    def test_instance_id_registers_for_the_scope(self) -> None:
        bus = EventBus()
        with EventBusProvider(bus, instance_id="chat"):
            self.assertIs(registry.resolve_instance("chat"), bus)
        self.assertIsNone(registry.get_instance("chat"))

    def test_binding_is_restored_when_block_raises(self) -> None:
        with self.assertRaises(ValueError):
            with EventBusProvider(EventBus(), instance_id="chat"):
                raise ValueError("boom")
        self.assertIsNone(current_bus())
        self.assertIsNone(registry.get_instance("chat"))

    def test_provider_cannot_be_entered_twice(self) -> None:
        provider = EventBusProvider(EventBus())
        with provider:
            with self.assertRaises(CozyEventError):
                provider.__enter__()
        self.assertFalse(provider.active)


class AsyncProviderTests(unittest.IsolatedAsyncioTestCase):
    """Validate async usage and task propagation."""

    async def test_async_provider_is_visible_in_child_tasks(self) -> None:
        bus = EventBus()

        async def child() -> EventBus | None:
            return current_bus()

        async with EventBusProvider(bus):
            seen = await asyncio.create_task(child())
        self.assertIs(seen, bus)
        self.assertIsNone(current_bus())


if __name__ == "__main__":
    unittest.main()
