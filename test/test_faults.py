"""
Fault taxonomy tests (messages, codes, rich rendering, reporting).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import io
import sys
import unittest
from unittest import TestCase
from unittest.mock import patch

from rich.console import Console

from switchyard.faults import (
    CommandException,
    FaultCode,
    FlagError,
    InvalidFlagValueError,
    MissingFlagValueError,
    UnknownCommandError,
    UnknownFlagError,
    report,
)


def render(renderable):
    console = Console(file=io.StringIO(), width=200, color_system=None, highlight=False)
    console.print(renderable)
    return console.file.getvalue()


class TestFaults(TestCase):

    def testMessagesAreVerbatim(self):
        self.assertEqual(str(UnknownCommandError("bar")), "bar: no such command")
        self.assertEqual(str(UnknownFlagError("-x")), "flag provided but not defined: -x")
        self.assertEqual(str(MissingFlagValueError("-o")), "flag needs an argument: -o")
        self.assertEqual(
            str(InvalidFlagValueError("-n", "four", "not a number")),
            "invalid value 'four' for flag -n: not a number",
        )

    def testHierarchy(self):
        for fault in (UnknownFlagError("-x"), MissingFlagValueError("-o"), InvalidFlagValueError("-n", "x", "bad")):
            with self.subTest(fault=type(fault).__name__):
                self.assertIsInstance(fault, FlagError)
                self.assertIsInstance(fault, CommandException)
        self.assertNotIsInstance(UnknownCommandError("bar"), FlagError)

    def testMessageMustBeString(self):
        with self.assertRaises(TypeError):
            CommandException(42)

    def testRichRendering(self):
        fault = UnknownCommandError("bar", prog="ship")
        self.assertEqual(render(fault), "\n".join([
            "[ ship — 11101 | Unknown Command ]",
            "bar: no such command",
            " → run with --help to list the available commands",
            "",
        ]))

    def testRenderingWithoutHint(self):
        output = render(InvalidFlagValueError("-n", "x", "bad", prog="ship"))
        self.assertEqual(output.splitlines(), [
            "[ ship — 11124 | Invalid Flag Value ]",
            "invalid value 'x' for flag -n: bad",
        ])

    def testReplaceKeepsOriginalUntouched(self):
        fault = UnknownFlagError("-x")
        replaced = fault.__replace__(prog="ship", title="oops")
        self.assertIsInstance(replaced, UnknownFlagError)
        self.assertEqual(replaced.flag, "-x")
        self.assertEqual(str(replaced), str(fault))
        self.assertEqual(replaced.options["title"], "oops")
        self.assertNotIn("prog", fault.options)

    def testCodesCanBeNormalizedByHost(self):
        main = sys.modules["__main__"]
        with patch.object(main, "__codes__", {FaultCode.UNKNOWN_COMMAND: "E-ROUTE"}, create=True):
            self.assertEqual(FaultCode.UNKNOWN_COMMAND.normalize(), "E-ROUTE")
            self.assertEqual(FaultCode.UNKNOWN_FLAG.normalize(), "11112")


class TestReport(TestCase):

    def setUp(self):
        self.console = Console(file=io.StringIO(), width=200, color_system=None, highlight=False)

    def testPlainExceptions(self):
        report(RuntimeError("disk full"), self.console, prog="ship")
        self.assertEqual(self.console.file.getvalue(), "ship: disk full\n")

    def testCommandExceptions(self):
        report(UnknownCommandError("bar"), self.console, prog="ship")
        self.assertTrue(self.console.file.getvalue().startswith("[ ship — 11101 | Unknown Command ]\n"))

    def testColorfulReportKeepsText(self):
        console = Console(file=io.StringIO(), width=200, color_system="truecolor", force_terminal=True)
        report(UnknownCommandError("bar"), console, prog="ship", colorful=True)
        output = console.file.getvalue()
        self.assertIn("\x1b[", output)
        self.assertIn("no such command", output)


if __name__ == "__main__":
    unittest.main()
