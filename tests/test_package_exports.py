"""Tests for top-level package lazy exports."""

from __future__ import annotations

import unittest

import cozy_event


class PackageExportTests(unittest.TestCase):
    """Ensure __getattr__ and exported symbols behave as expected."""

    def test_every_exported_symbol_resolves(self) -> None:
        for name in cozy_event.__all__:
            with self.subTest(name=name):
                self.assertIsNotNone(getattr(cozy_event, name))

    def test_lazy_exports_resolve_known_symbols(self) -> None:
        self.assertTrue(callable(cozy_event.load_config))
        self.assertTrue(callable(cozy_event.subscribe))
        self.assertTrue(callable(cozy_event.get_default_bus))
        self.assertIsInstance(cozy_event.get_default_bus(), cozy_event.EventBus)
        self.assertTrue(issubclass(cozy_event.InvalidEventNameError, cozy_event.CozyEventError))

    def test_unknown_symbol_raises_attribute_error(self) -> None:
        with self.assertRaises(AttributeError):
            getattr(cozy_event, "THIS_DOES_NOT_EXIST")


if __name__ == "__main__":
    unittest.main()
