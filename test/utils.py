"""
Utilities and placeholder tests (Unset, coalesce, rename, mirror, ordinal,
IntrospectiveType, void).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import importlib
import unittest
from unittest import TestCase

from rich.console import Console

from typecmd.utils import IntrospectiveType, Unset, UnsetType, coalesce, mirror, ordinal, rename
from typecmd.void import void


class TestPackage(TestCase):
    """The package imports cleanly and exposes its public API."""

    def testImport(self):
        module = importlib.import_module("typecmd")
        self.assertEqual(module.__title__, "typecmd")
        for name in module.__all__:
            with self.subTest(name=name):
                self.assertTrue(hasattr(module, name))

    def testSentinelPrecedesMetaclass(self):
        self.assertIs(IntrospectiveType.__displayable__, Unset)


class TestUnset(TestCase):
    """The not-provided sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce("", "x"), "")


class TestHelpers(TestCase):
    """Small helpers shared by the package."""

    def testRename(self):
        def helper():
            pass

        self.assertIs(rename(helper, "renamed"), helper)
        self.assertEqual(helper.__name__, "renamed")
        self.assertEqual(helper.__qualname__, "renamed")

        @rename("decorated")
        def other():
            pass

        self.assertEqual(other.__name__, "decorated")

        with self.assertRaises(TypeError):
            rename(42, "name")
        with self.assertRaises(TypeError):
            rename()

    def testOrdinal(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(111), "111th")

    def testMirrorFreezes(self):
        class Holder:
            items = mirror("items")
            table = mirror("table")
            names = mirror("names")

            def __init__(self):
                self._items = [1, 2]
                self._table = {"a": 1}
                self._names = {"x"}

        holder = Holder()
        self.assertEqual(holder.items, (1, 2))
        self.assertEqual(holder.names, frozenset({"x"}))
        with self.assertRaises(TypeError):
            holder.table["b"] = 2
        with self.assertRaises(AttributeError):
            holder.items = ()


class TestIntrospectiveType(TestCase):
    """Generated properties and representations."""

    def setUp(self):
        class SampleRecord(metaclass=IntrospectiveType):
            __introspectable__ = ("name", "tags")

            def __init__(self, name, tags):
                self._name = name
                self._tags = tags

        self.cls = SampleRecord

    def testTypename(self):
        self.assertEqual(self.cls.__typename__, "sample-record")

    def testProperties(self):
        record = self.cls("x", ["a"])
        self.assertEqual(record.name, "x")
        self.assertEqual(record.tags, ("a",))

    def testRepr(self):
        self.assertEqual(repr(self.cls("x", [])), "sample-record(name='x', tags=())")
        self.assertEqual(list(self.cls("x", []).__rich_repr__()), [("name", "x"), ("tags", ())])


class TestVoid(TestCase):
    """The no-kind placeholder."""

    def testSingleton(self):
        self.assertIs(type(void)(), void)
        self.assertIs(copy.copy(void), void)
        self.assertIs(copy.deepcopy(void), void)

    def testFalsyAndRepr(self):
        self.assertFalse(void)
        self.assertEqual(repr(void), "(void)")

    def testRich(self):
        console = Console(color_system=None, force_terminal=False)
        with console.capture() as capture:
            console.print(void)
        self.assertEqual(capture.get().strip(), "(void)")


if __name__ == "__main__":
    unittest.main()
