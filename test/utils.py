"""
Utility tests (Unset sentinel, coalesce, mirror, palette, ordinal).

Scope
- Validate the sentinel's identity, truthiness and pickling.
- Validate mirror() views and palette() overrides.
- Validate ordinal labels.

Conventions
- Test method names follow CamelCase per project convention.
"""

import pickle
import sys
import unittest
from unittest import TestCase, mock

from helmsman.utils import Unset, UnsetType, coalesce, mirror, ordinal, palette


class TestUnset(TestCase):
    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testFalsyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "x"), "x")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertIsNone(coalesce(None, 5))


class TestMirror(TestCase):
    def testViewsAreImmutable(self):
        class Holder:
            items = mirror("items")
            table = mirror("table")
            name = mirror("name")

            def __init__(self):
                self._items = [1, 2]
                self._table = {"a": 1}
                self._name = "holder"

        holder = Holder()
        self.assertEqual(holder.items, (1, 2))
        self.assertEqual(holder.name, "holder")
        with self.assertRaises(TypeError):
            holder.table["b"] = 2
        with self.assertRaises(AttributeError):
            holder.items = ()


class TestPalette(TestCase):
    def testColorlessStylesAreEmpty(self):
        style = palette({"key": "bold"}, colorful=False)
        self.assertEqual(style("key"), "")

    def testHostOverrides(self):
        with mock.patch.object(sys.modules["__main__"], "__styles__", {"key": "italic"}, create=True):
            style = palette({"key": "bold", "other": "dim"})
        self.assertEqual(style("key"), "italic")
        self.assertEqual(style("other"), "dim")
        self.assertEqual(style("missing"), "")


class TestOrdinal(TestCase):
    def testLabels(self):
        self.assertEqual([ordinal(number) for number in (1, 3, 10)], ["first", "third", "tenth"])
        self.assertEqual([ordinal(number) for number in (11, 12, 13, 21, 22, 23, 111)],
                         ["11th", "12th", "13th", "21st", "22nd", "23rd", "111th"])

    def testRejectsNonIntegers(self):
        with self.assertRaises(TypeError):
            ordinal(1.0)
        with self.assertRaises(TypeError):
            ordinal(True)


if __name__ == "__main__":
    unittest.main()
