"""
Usage rendering tests (root block, command block, plain layout exactness).

Conventions
- Test method names follow CamelCase per project convention.
- Layouts are compared on the plain text of the rendered rich Text.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from switchyard import Command, FlagSet, ProgramBuilder, command
from switchyard.usage import render_root, render_command, show

HELP = "Show the test information."

ROOT = """\
sample -  My sample command line tool.

Usage: sample <command>

Flags:

  -d, --debug  enable debug logging (default: false)
  -o           where to save the output (default: defaultOutput)
  -t, --thing  a flag for thing (default: false)
  --token      API token (default: <none>)

Commands:

  error    Show the test information.
  test     Show the test information.
  version  Show the version information."""

VERSION = """\
Usage: sample version

Show the version information.

Flags:

  -d, --debug  enable debug logging (default: false)
  -o           where to save the output (default: defaultOutput)
  -t, --thing  a flag for thing (default: false)
  --token      API token (default: <none>)"""


def console():
    return Console(file=io.StringIO(), width=200, color_system=None, highlight=False)


class HelpCommand(Command):
    short_help = HELP

    def __init__(self, name):
        self._name = name

    @property
    def name(self):
        return self._name

    def run(self, context, args, /):
        pass


class TestUsageLayout(TestCase):
    """Exact layout of the root and per-command blocks."""

    def setUp(self):
        self.stdout = console()
        self.stderr = console()
        builder = ProgramBuilder("sample", "My sample command line tool", stdout=self.stdout, stderr=self.stderr)
        builder.option("--token", default="", descr="API token")
        builder.option("-o", default="defaultOutput", descr="where to save the output")
        builder.flag("--thing", "-t", descr="a flag for thing")
        builder.flag("-d", "--debug", descr="enable debug logging")
        builder.add_command(HelpCommand("error"), HelpCommand("test"))
        builder.action(lambda context, args: None)
        self.program = builder.build()

    def testRootBlock(self):
        self.assertEqual(self.program.usage().plain, ROOT)

    def testVersionBlock(self):
        self.assertEqual(self.program.usage(self.program.lookup("version")).plain, VERSION)

    def testUsageGoesToStderrOnly(self):
        self.program.print_usage()
        self.assertEqual(self.stderr.file.getvalue(), ROOT + "\n\n")
        self.assertEqual(self.stdout.file.getvalue(), "")

    def testCommandBlockShowsArgsAndLongHelp(self):
        builder = ProgramBuilder("sample")
        builder.flag("-d", descr="enable debug logging")

        @builder.command(args="<src> <dst>")
        def copy(context, args):
            """Copy a file.

            Both paths must exist."""

        block = builder.build().usage(copy).plain
        self.assertEqual(block, "\n".join([
            "Usage: sample copy <src> <dst>",
            "",
            "Copy a file.",
            "",
            "Both paths must exist.",
            "",
            "Flags:",
            "",
            "  -d  enable debug logging (default: false)",
        ]))


class TestUsageSections(TestCase):
    """Optional sections and banner normalization."""

    def testBannerWithoutDescription(self):
        block = render_root("tool", "", FlagSet(), ()).plain
        self.assertEqual(block, "tool\n\nUsage: tool <command>")

    def testTrailingPeriodIsNotDoubled(self):
        block = render_root("tool", "Does things.", FlagSet(), ()).plain
        self.assertTrue(block.startswith("tool -  Does things.\n"))

    def testHiddenEntriesAreSkipped(self):
        flags = FlagSet()
        flags.flag("-v", descr="verbose output")
        flags.option("--secret", descr="internal", hidden=True)
        commands = [
            command(lambda context, args: None, name="zeta", short="last"),
            command(lambda context, args: None, name="alpha", short="first"),
            command(lambda context, args: None, name="debug", short="internal", hidden=True),
        ]
        block = render_root("tool", "", flags, commands).plain
        self.assertNotIn("secret", block)
        self.assertNotIn("debug", block)
        self.assertTrue(block.endswith("Commands:\n\n  alpha  first\n  zeta   last"))

    def testCommandWithoutHelpOrFlags(self):
        item = command(lambda context, args: None, name="noop")
        self.assertEqual(render_command("tool", item, FlagSet()).plain, "Usage: tool noop")

    def testColorfulRenderingKeepsPlainText(self):
        flags = FlagSet()
        flags.flag("-v", descr="verbose output")
        plain = render_root("tool", "Does things", flags, ()).plain
        styled = render_root("tool", "Does things", flags, (), colorful=True)
        self.assertEqual(styled.plain, plain)
        self.assertTrue(styled.spans)

    def testShowAppendsBlankLine(self):
        output = console()
        show(output, render_root("tool", "", FlagSet(), ()))
        self.assertEqual(output.file.getvalue(), "tool\n\nUsage: tool <command>\n\n")


if __name__ == "__main__":
    unittest.main()
