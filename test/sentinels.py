"""
Utilities behavioral tests (sentinel, coalesce, rename, mirror, ordinal).

Scope
- Validate the Unset sentinel contract (falsey, singleton, sealed, copy-stable).
- Validate coalesce/rename/mirror helpers used by the flag tree.
- Validate ordinal labels used in position-first fault messages.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import unittest
from unittest import TestCase

from deepflags.utils import Unset, UnsetType, coalesce, rename, mirror, ordinal


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testUnsetIsFalsey(self):
        self.assertFalse(Unset)

    def testUnsetRepr(self):
        self.assertEqual(repr(Unset), "Unset")

    def testUnsetIsSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testUnsetSurvivesCopies(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy([Unset])[0], Unset)

    def testUnsetCannotBeSubclassed(self):
        with self.assertRaises(TypeError):
            class Sub(UnsetType):  # NOQA: F-841
                pass

    def testUnsetJoinsUnionChecks(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("text", str | Unset))
        self.assertFalse(isinstance(3, str | Unset))


class TestCoalesce(TestCase):
    """Behavioral tests for coalesce()."""

    def testCoalesceReplacesUnset(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")

    def testCoalesceDefaultsToNone(self):
        self.assertIsNone(coalesce(Unset))

    def testCoalescePreservesFalseyValues(self):
        for value in (None, 0, "", [], False):
            self.assertIs(coalesce(value, "fallback"), value)


class TestRename(TestCase):
    """Behavioral tests for rename()."""

    def testRenameFunctionForm(self):
        def work():
            pass

        self.assertIs(rename(work, "do_work"), work)
        self.assertEqual(work.__name__, "do_work")
        self.assertEqual(work.__qualname__, "do_work")

    def testRenameDecoratorForm(self):
        @rename("renamed")
        def work():
            pass

        self.assertEqual(work.__name__, "renamed")

    def testRenameRejectsNonCallable(self):
        with self.assertRaises(TypeError):
            rename(3, "name")

    def testRenameRejectsWrongArity(self):
        with self.assertRaises(TypeError):
            rename()

    def testRenameRejectsBuiltins(self):
        with self.assertRaises(TypeError):
            rename(len, "size")


class TestMirror(TestCase):
    """Behavioral tests for mirror() read-only properties."""

    def testMirrorHandsOutCopies(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = [1, 2]

        holder = Holder()
        holder.items.append(3)
        self.assertEqual(holder.items, [1, 2])

    def testMirrorKeepsTuples(self):
        class Holder:
            names = mirror("names")

            def __init__(self):
                self._names = ("--verbose", "-v")

        holder = Holder()
        self.assertIs(holder.names, holder._names)

    def testMirrorIsReadOnly(self):
        class Holder:
            value = mirror("value")
            _value = 1

        with self.assertRaises(AttributeError):
            Holder().value = 2

    def testMirrorRequiresString(self):
        with self.assertRaises(TypeError):
            mirror(1)


class TestOrdinal(TestCase):
    """Behavioral tests for ordinal() position labels."""

    def testOrdinalWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testOrdinalSuffixes(self):
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(24), "24th")
        self.assertEqual(ordinal(101), "101st")

    def testOrdinalTeens(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(13), "13th")
        self.assertEqual(ordinal(112), "112th")

    def testOrdinalRejectsNonIntegers(self):
        with self.assertRaises(TypeError):
            ordinal("1")
        with self.assertRaises(TypeError):
            ordinal(True)


if __name__ == "__main__":
    unittest.main()
