"""
Help rendering for a bound record.

Usage is the flag-set description accumulated by the binder: the flag
entries, the positional entries and the command table. It is a rich
renderable (print it on any Console) and can also produce plain text.

Layout
    Usage: PROG [OPTION]... SOURCE TARGET... COMMAND [ARGUMENT]...

    Options:
      -v/-verbose  bool (default: true, env: APP_VERBOSE)
                   print more
      SOURCE       string
    Commands:
      create  create a new thing

Palette keys
- usage-label, program-name, usage-section
- section-label, flag-name, positional-name, type, annotation, description
- command-name, command-description

Customization
- define a mapping named __styles__ in __main__ to override any palette entry.
"""
import io
from collections import defaultdict, namedtuple

from rich.console import Console, Group
from rich.padding import Padding
from rich.table import Table
from rich.text import Text

from .utils import Unset

Entry = namedtuple("Entry", ("name", "type", "default", "env", "usage"), defaults=(None, None, ""))
Entry.__doc__ = """
one help row: joined names (or positional label), value-kind label, rendered
default (None when not shown), environment variable (None when absent) and
usage text.
"""


class Usage:
    def __init__(self, prog, flags=(), singles=(), multi=None, commands=()):
        self.prog = prog
        self.flags = tuple(flags)
        self.singles = tuple(singles)
        self.multi = multi
        self.commands = tuple(commands)

    @property
    def entries(self):
        return self.flags + self.singles + ((self.multi,) if self.multi else ())

    def __rich__(self):
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "usage-section": "bold #36C5F0",
            "section-label": "bold #FFFFFF",
            "flag-name": "bold #22C55E",
            "positional-name": "bold #FFD600",
            "type": "#36C5F0",
            "annotation": "#737373",
            "description": "#9CA3AF",
            "command-name": "bold #36C5F0",
            "command-description": "#9CA3AF",
        } | getattr(__import__("__main__"), "__styles__", {}))

        line = Text()
        line.append("Usage:", styles["usage-label"]).append(" ")
        line.append(str(self.prog), styles["program-name"])
        if len(self.flags) == 1:
            line.append(" [OPTION]", styles["usage-section"])
        elif self.flags:
            line.append(" [OPTION]...", styles["usage-section"])
        for entry in self.singles:
            line.append(" ").append(entry.name, styles["usage-section"])
        if self.multi:
            line.append(" ").append(self.multi.name, styles["usage-section"])
        if self.commands:
            line.append(" COMMAND [ARGUMENT]...", styles["usage-section"])

        renders = [line]

        if entries := self.entries:
            table = Table.grid(padding=(0, 2))
            table.add_column(no_wrap=True)
            table.add_column()
            for index, entry in enumerate(entries):
                style = styles["flag-name"] if index < len(self.flags) else styles["positional-name"]
                detail = Text(entry.type, styles["type"])
                annotations = []
                if entry.default is not None:
                    annotations.append("default: %s" % entry.default)
                if entry.env is not None:
                    annotations.append("env: %s" % entry.env)
                if annotations:
                    detail.append(" (%s)" % ", ".join(annotations), styles["annotation"])
                table.add_row(Text(entry.name, style), detail)
                if entry.usage:
                    table.add_row("", Text(entry.usage, styles["description"]))
            renders.extend((Text(""), Text("Options:", styles["section-label"]), Padding(table, (0, 0, 0, 2))))

        if self.commands:
            table = Table.grid(padding=(0, 2))
            table.add_column(no_wrap=True)
            table.add_column()
            for command in self.commands:
                table.add_row(
                    Text(command.name, styles["command-name"]),
                    Text(command.usage or "", styles["command-description"]),
                )
            renders.extend((Text("Commands:", styles["section-label"]), Padding(table, (0, 0, 0, 2))))

        return Group(*renders)

    def render(self, width=80):
        """
        return the help as plain text (no colors, fixed width).
        """
        console = Console(file=io.StringIO(), width=width, color_system=None, highlight=False, soft_wrap=False)
        console.print(self)
        return console.file.getvalue()

    def print(self, file=Unset):
        """
        print the help on `file` (stderr by default).
        """
        if file is Unset:
            Console(stderr=True, highlight=False).print(self)
        else:
            Console(file=file, highlight=False).print(self)

    def __str__(self):
        return self.render()

    def __repr__(self):
        return f"usage(prog={self.prog!r}, flags={len(self.flags)}, positionals={len(self.singles) + bool(self.multi)}, commands={len(self.commands)})"


__all__ = (
    "Entry",
    "Usage",
)
