"""
Utilities module behavioral tests (sentinel, coalesce, labels).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from cliexpr.utils import Unset, UnsetType, coalesce, ordinal, pluralize


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsey(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            class Other(UnsetType):
                pass

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce("", "fallback"), "")


class TestLabels(TestCase):
    """Behavioral tests for ordinal() and pluralize()."""

    def testOrdinalWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")

    def testOrdinalSuffixes(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(113), "113th")
        self.assertEqual(ordinal(103), "103rd")

    def testOrdinalRejectsNonIntegers(self):
        with self.assertRaises(TypeError):
            ordinal(True)

    def testPluralize(self):
        self.assertEqual(pluralize(1, "argument"), "1 argument")
        self.assertEqual(pluralize(0, "argument"), "0 arguments")
        self.assertEqual(pluralize(2, "nested expression"), "2 nested expressions")
        self.assertEqual(pluralize(3, "entry"), "3 entries")
        self.assertEqual(pluralize(3, "key"), "3 keys")


if __name__ == "__main__":
    unittest.main()
