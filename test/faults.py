"""
Faults module behavioral tests (codes, options, rendering, trigger).

Scope
- Validate FaultCode normalization and host remapping via __main__.__codes__.
- Validate FlagException options (read-only), __replace__ merging and rendering.
- Validate trigger() in shell mode (rendered to the stderr console) and non-shell mode (raised).

Conventions
- Test method names follow CamelCase per project convention.
- The module console is swapped for a StringIO-backed rich Console when output is inspected.
"""

from __future__ import annotations

import copy
import io
import sys
import unittest
from unittest import TestCase
from unittest.mock import patch

from rich.console import Console

from deepflags.faults import (
    FaultCode,
    FlagException,
    MissingValueError,
    UnrecognizedFlagError,
    getdoc,
    trigger,
)


def fault(**overrides):
    return MissingValueError(
        "flag '--param' at second position requires a value",
        **{
            "title": "missing value",
            "code": FaultCode.MISSING_VALUE,
            "hint": "pass it as '--param VALUE'",
        } | overrides
    )


class TestFaultCode(TestCase):
    """Behavioral tests for FaultCode."""

    def testCodesAreStable(self):
        self.assertEqual(FaultCode.MISSING_VALUE, 11111)
        self.assertEqual(FaultCode.TYPE_MISMATCH, 11112)
        self.assertEqual(FaultCode.UNEXPECTED_VALUE, 11113)
        self.assertEqual(FaultCode.UNRECOGNIZED_FLAG, 11121)
        self.assertEqual(FaultCode.UNEXPECTED_OPERAND, 11122)
        self.assertEqual(FaultCode.MISSING_FLAG, 11123)
        self.assertEqual(FaultCode.MALFORMED_INVOCATION, 11191)

    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.TYPE_MISMATCH.normalize(), "11112")

    def testNormalizeHonoursHostCodes(self):
        codes = {FaultCode.TYPE_MISMATCH: "E-TYPE"}
        with patch.object(sys.modules["__main__"], "__codes__", codes, create=True):
            self.assertEqual(FaultCode.TYPE_MISMATCH.normalize(), "E-TYPE")


class TestFlagException(TestCase):
    """Behavioral tests for FlagException."""

    def testMessageAndOptions(self):
        error = fault()
        self.assertEqual(str(error), "flag '--param' at second position requires a value")
        self.assertEqual(error.options["code"], FaultCode.MISSING_VALUE)

    def testOptionsAreReadOnly(self):
        with self.assertRaises(TypeError):
            fault().options["hint"] = "other"  # type: ignore[index]

    def testReplaceMergesOptions(self):
        original = fault()
        replica = copy.replace(original, hint="other", shell=True)
        self.assertIsInstance(replica, MissingValueError)
        self.assertIsNot(replica, original)
        self.assertEqual(replica.message, original.message)
        self.assertEqual(replica.options["hint"], "other")
        self.assertTrue(replica.options["shell"])
        self.assertEqual(original.options["hint"], "pass it as '--param VALUE'")

    def testSubclassesShareBase(self):
        self.assertTrue(issubclass(UnrecognizedFlagError, FlagException))


class TestTrigger(TestCase):
    """Behavioral tests for trigger() and rendering."""

    def render(self, **options):
        buffer = io.StringIO()
        with patch("deepflags.faults.console", Console(file=buffer, width=200)):
            trigger(fault(), shell=True, colorful=False, program="tool", **options)
        return buffer.getvalue()

    def testNonShellRaises(self):
        with self.assertRaises(MissingValueError) as context:
            trigger(fault(), shell=False)
        self.assertFalse(context.exception.options["shell"])

    def testShellRendersHeaderMessageAndHint(self):
        output = self.render()
        self.assertIn("[ tool — 11111 | Missing Value ]", output)
        self.assertIn("flag '--param' at second position requires a value", output)
        self.assertIn("→ pass it as '--param VALUE'", output)

    def testShellHonoursHostProgramName(self):
        with patch.object(sys.modules["__main__"], "__prog__", "host", create=True):
            output = self.render()
        self.assertIn("[ host — 11111 | Missing Value ]", output)

    def testFancyRendersPanel(self):
        output = self.render(fancy=True)
        self.assertIn("Missing Value", output)
        self.assertIn("requires a value", output)
        self.assertIn("╭", output)

    def testShellDoesNotExit(self):
        self.render()

    def testTriggerRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))


class TestGetdoc(TestCase):
    """Behavioral tests for getdoc()."""

    def testMissingDocIsNone(self):
        self.assertIsNone(getdoc(FaultCode.MISSING_FLAG))

    def testHostDocs(self):
        docs = {FaultCode.MISSING_FLAG: "a required flag was not given"}
        with patch.object(sys.modules["__main__"], "__docs__", docs, create=True):
            self.assertEqual(getdoc(FaultCode.MISSING_FLAG), "a required flag was not given")

    def testRequiresFaultCode(self):
        with self.assertRaises(TypeError):
            getdoc(11111)


if __name__ == "__main__":
    unittest.main()
