"""
Switchyard usage renderer: root and per-command usage blocks.

Layout (plain mode)

    sample -  My sample command line tool.

    Usage: sample <command>

    Flags:

      -d, --debug  enable debug logging (default: false)
      --token      API token (default: <none>)

    Commands:

      test     Show the test information.
      version  Show the version information.

and for a single command

    Usage: sample test <args>

    Show the test information.

    Flags:

      -d, --debug  enable debug logging (default: false)

Rendering
- render_root()/render_command() build a rich Text and never print; show() prints a
  block on a console, which the program always points at stderr.
- Palette keys: program-name, description-section, usage-label, usage-section,
  group-label, flag-name, argument-description, children, children-description.
  Define a mapping named __styles__ in __main__ to override any entry. When colorful
  is False, no style is applied and the output is plain text.
"""
from collections import defaultdict

from rich.text import Text

_PADDING = 2


def _styler(colorful):
    styles = defaultdict(str, {
        # === Head sections ===
        "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
        "description-section": "italic #A3A3A3",  # Neutral gray
        "usage-label": "bold #00E6FF",  # CYAN → signature info color
        "usage-section": "bold #36C5F0",  # SKY-BLUE → softer than cyan

        # === Groups / flags ===
        "group-label": "bold #FFFFFF",  # Pure white headers
        "flag-name": "bold #22C55E",  # GREEN for flags
        "argument-description": "#9CA3AF",  # Muted gray

        # === Commands table ===
        "children": "bold #36C5F0",  # Sky-blue subcommands
        "children-description": "#9CA3AF",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    return styler


def _table(label, rows, styler, name_style, descr_style):
    # Two aligned columns: the name column is padded to the widest entry plus two spaces.
    section = Text()
    section.append(label, styler("group-label")).append(":\n")
    width = max(len(name) for name, _ in rows) + _PADDING
    for name, descr in rows:
        section.append("\n").append(" " * _PADDING)
        if descr:
            section.append(name.ljust(width), styler(name_style))
            section.append(descr, styler(descr_style))
        else:
            section.append(name, styler(name_style))
    return section


def _join(sections):
    return Text("\n\n").join(section for section in sections if section)


def render_root(name, description, flags, commands, *, colorful=False):
    """
    Build the root usage block.

    Parameters
    - name: program display name.
    - description: one-line description; a trailing period is normalized.
    - flags: FlagSet of global flags.
    - commands: iterable of Command; hidden ones are skipped, the rest sorted by name.
    """
    styler = _styler(colorful)

    banner = Text(name, styler("program-name"))
    if description := description.strip().removesuffix("."):
        banner.append(" -  ").append(description + ".", styler("description-section"))

    usage = Text.assemble(
        ("Usage:", styler("usage-label")),
        " ",
        (f"{name} <command>", styler("usage-section")),
    )

    sections = [banner, usage]
    if rows := flags.describe():
        sections.append(_table("Flags", rows, styler, "flag-name", "argument-description"))
    visible = sorted((command for command in commands if not command.hidden), key=lambda x: x.name)
    if visible:
        rows = [(command.name, command.short_help) for command in visible]
        sections.append(_table("Commands", rows, styler, "children", "children-description"))
    return _join(sections)


def render_command(name, command, flags, *, colorful=False):
    """
    Build the usage block of one command.

    `flags` must already hold the global flags merged with whatever the command
    registered for itself.
    """
    styler = _styler(colorful)

    route = f"{name} {command.name}"
    if command.args:
        route = f"{route} {command.args}"
    usage = Text.assemble(("Usage:", styler("usage-label")), " ", (route, styler("usage-section")))

    sections = [usage, Text(command.long_help.strip(), styler("description-section"))]
    if rows := flags.describe():
        sections.append(_table("Flags", rows, styler, "flag-name", "argument-description"))
    return _join(sections)


def show(console, block, /):
    """
    Print a usage block followed by a blank line.
    """
    console.print(block, end="\n\n", soft_wrap=True)


__all__ = (
    "render_root",
    "render_command",
    "show",
)
