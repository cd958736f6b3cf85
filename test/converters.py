"""
Converters module behavioral tests (registry, sized kinds, aliases).

Scope
- Validate the boolean alias table (case-insensitive, closed set).
- Validate integer parsing (base prefixes, leading zeros, width range checks).
- Validate floating kinds (finite, width range, single-precision rounding).
- Validate char/str kinds and the register/lookup contract.

Conventions
- Test method names follow CamelCase per project convention.
- Conversion failures are asserted as ValueError, the registry's convention.
"""

from __future__ import annotations

import unittest
from pathlib import PurePosixPath
from typing import NewType
from unittest import TestCase

from deepflags.converters import (
    BOOLEANS,
    Char,
    Float32,
    Float64,
    Int8,
    Int64,
    UInt8,
    UInt16,
    convert,
    lookup,
    register,
)


class TestBooleans(TestCase):
    """Behavioral tests for the bool kind."""

    def testTruthyAliases(self):
        for raw in ("1", "on", "yes", "true", "TRUE", "Yes", "oN"):
            self.assertIs(convert(bool, raw), True, raw)

    def testFalseyAliases(self):
        for raw in ("0", "off", "no", "false", "FALSE", "No"):
            self.assertIs(convert(bool, raw), False, raw)

    def testUnknownAliasRejected(self):
        for raw in ("maybe", "", "y", "2"):
            with self.assertRaises(ValueError):
                convert(bool, raw)

    def testAliasTableIsReadOnly(self):
        with self.assertRaises(TypeError):
            BOOLEANS["y"] = True  # type: ignore[index]


class TestIntegers(TestCase):
    """Behavioral tests for int and the sized integer kinds."""

    def testDecimal(self):
        self.assertEqual(convert(int, "42"), 42)
        self.assertEqual(convert(int, "-42"), -42)

    def testBasePrefixes(self):
        self.assertEqual(convert(int, "0x1F"), 31)
        self.assertEqual(convert(int, "0o17"), 15)
        self.assertEqual(convert(int, "0b101"), 5)

    def testLeadingZerosReadAsDecimal(self):
        self.assertEqual(convert(int, "010"), 10)

    def testWholeTextMustParse(self):
        for raw in ("12abc", "", " 5", "5 ", "1.5"):
            with self.assertRaises(ValueError):
                convert(int, raw)

    def testAsciiDigitsOnly(self):
        for raw in ("1_2", "١٢", "１２", "0x_1F"):
            with self.assertRaises(ValueError, msg=raw):
                convert(Int8, raw)
            with self.assertRaises(ValueError, msg=raw):
                convert(int, raw)

    def testSignedWidth(self):
        self.assertEqual(convert(Int8, "127"), 127)
        self.assertEqual(convert(Int8, "-128"), -128)
        with self.assertRaises(ValueError):
            convert(Int8, "128")
        with self.assertRaises(ValueError):
            convert(Int8, "-129")

    def testUnsignedWidth(self):
        self.assertEqual(convert(UInt8, "255"), 255)
        self.assertEqual(convert(UInt16, "0xFFFF"), 65535)
        with self.assertRaises(ValueError):
            convert(UInt8, "256")
        with self.assertRaises(ValueError):
            convert(UInt8, "-1")

    def testInt64Bounds(self):
        self.assertEqual(convert(Int64, "9223372036854775807"), 2 ** 63 - 1)
        with self.assertRaises(ValueError):
            convert(Int64, "9223372036854775808")

    def testUnboundedInt(self):
        self.assertEqual(convert(int, "9223372036854775808"), 2 ** 63)


class TestFloats(TestCase):
    """Behavioral tests for float and the sized floating kinds."""

    def testPlainValues(self):
        self.assertEqual(convert(float, "10.5"), 10.5)
        self.assertEqual(convert(float, ".5"), 0.5)
        self.assertEqual(convert(Float64, "-2.75"), -2.75)
        self.assertEqual(convert(Float64, "0"), 0.0)

    def testNonFiniteRejected(self):
        for raw in ("nan", "inf", "-inf", "1e309"):
            with self.assertRaises(ValueError):
                convert(Float64, raw)

    def testFloat32Range(self):
        self.assertEqual(convert(Float32, "1.5"), 1.5)
        with self.assertRaises(ValueError):
            convert(Float32, "3.5e38")
        with self.assertRaises(ValueError):
            convert(Float32, "-3.5e38")

    def testFloat32Rounding(self):
        value = convert(Float32, "0.1")
        self.assertNotEqual(value, 0.1)
        self.assertAlmostEqual(value, 0.1, places=6)

    def testAsciiDigitsOnly(self):
        for raw in ("1_0.5", "١.٥", "１.５"):
            with self.assertRaises(ValueError, msg=raw):
                convert(Float64, raw)
            with self.assertRaises(ValueError, msg=raw):
                convert(Float32, raw)

    def testGarbageRejected(self):
        with self.assertRaises(ValueError):
            convert(float, "ten")


class TestTextKinds(TestCase):
    """Behavioral tests for Char and str."""

    def testCharSingleCharacter(self):
        self.assertEqual(convert(Char, "a"), "a")

    def testCharRejectsOtherLengths(self):
        for raw in ("", "ab"):
            with self.assertRaises(ValueError):
                convert(Char, raw)

    def testStringIsIdentity(self):
        for raw in ("", "some name", "-5", "--flag"):
            self.assertEqual(convert(str, raw), raw)


class TestRegistry(TestCase):
    """Behavioral tests for register/lookup."""

    def testRegisteredKindWins(self):
        Percent = NewType("Percent", int)

        @register(Percent)
        def percent(raw):
            return int(raw.rstrip("%"))

        self.assertIs(lookup(Percent), percent)
        self.assertEqual(convert(Percent, "50%"), 50)

    def testCallableIsItsOwnConverter(self):
        self.assertIs(lookup(PurePosixPath), PurePosixPath)
        self.assertEqual(convert(PurePosixPath, "a/b"), PurePosixPath("a/b"))

    def testUnknownKindRejected(self):
        with self.assertRaises(TypeError):
            lookup(42)

    def testRegisterRequiresCallable(self):
        with self.assertRaises(TypeError):
            register(complex)("not callable")

    def testConvertRequiresText(self):
        with self.assertRaises(TypeError):
            convert(int, 5)


if __name__ == "__main__":
    unittest.main()
