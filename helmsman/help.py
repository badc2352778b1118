"""
Helmsman help: render command descriptors as human-readable text.

What this module provides
- render(descriptors, name=Unset, *, colorful=False, fancy=False)
  Build a rich renderable listing every command (or only one) with its
  constructor overloads and its subcommands.
- plain(renderable, width=100) → str: render to plain text (no ANSI).
- helper(engine, name): build the built-in help command class. It overloads
  its constructor: no argument lists every command, one argument describes
  a single command.

Layout (per command)
    -w  write a message
      usage: -w <text: str>
             -w <text: str...>
      --r      <red: bool>        paint it red
      --color  <color: Color>

Customization
- __main__.__styles__ overrides any key of STYLES.
- When colorful is False, styling is suppressed.
"""
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .coercion import typename
from .descriptors import command, constructor
from .utils import Unset, palette

console = Console()

STYLES = {
    "help-command": "bold #F472B6",
    "help-description": "italic #A1A1AA",
    "help-usage": "bold #22D3EE",
    "help-subcommand": "bold #38BDF8",
    "help-subdescription": "#9CA3AF",
    "help-parameter": "bold #FACC15",
    "help-variadic": "bold italic #FACC15",
    "help-unknown": "bold #EF4444",
    "help-title": "bold #F472B6",
}


def render(descriptors, name=Unset, /, *, colorful=False, fancy=False):
    """
    Render the help of every descriptor, or of the one named name.
    """
    style = palette(STYLES, colorful=colorful)

    def text(fragment, key=""):
        return Text(str(fragment or ""), style(key))

    def parameters(signature):
        return Text(" ").join(
            text("<%s: %s%s>" % (parameter.name, typename(parameter.tag), "..." * parameter.variadic),
                 "help-variadic" if parameter.variadic else "help-parameter")
            for parameter in signature.parameters
        )

    def section(descriptor):
        renders = [Text.assemble(text(descriptor.name, "help-command"), "  ", text(descriptor.descr, "help-description"))]

        for index, signature in enumerate(descriptor.constructors):
            label = text("usage:", "help-usage") if not index else Text(" " * len("usage:"))
            line = Text.assemble("  ", label, " ", text(descriptor.name, "help-command"))
            if signature.parameters:
                line.append(" ").append_text(parameters(signature))
            renders.append(line)

        if descriptor.subcommands:
            table = Table(box=None, show_header=False, padding=(0, 2, 0, 0), pad_edge=False)
            table.add_column(no_wrap=True)
            table.add_column()
            table.add_column()
            for subcommand in descriptor.subcommands:
                for index, signature in enumerate(subcommand.signatures):
                    table.add_row(
                        Text.assemble("  ", text(subcommand.name, "help-subcommand")),
                        parameters(signature),
                        text(subcommand.descr, "help-subdescription") if not index else Text(""),
                    )
            renders.append(table)
        return Group(*renders)

    descriptors = list(descriptors)
    if name is not Unset:
        if not (descriptors := [descriptor for descriptor in descriptors if descriptor.name == name]):
            return Text.assemble("unknown command ", text(repr(name), "help-unknown"))

    renderable = Group(*map(section, descriptors))
    if fancy:
        return Panel(renderable, title=Text("[ COMMANDS ]", style("help-title")), title_align="left")
    return renderable


def plain(renderable, /, width=100):
    """
    Render to plain text, trailing whitespace trimmed per line.
    """
    capture = Console(color_system=None, force_terminal=False, width=width)
    with capture.capture() as output:
        capture.print(renderable)
    return "\n".join(line.rstrip() for line in output.get().splitlines()).strip("\n")


def helper(engine, name, /):
    """
    Build the help command class bound to an engine.

    Constructors
    - ()              → help of every registered command.
    - (command: str)  → help of one command, named with or without its prefix.
    """

    @command(name, descr="show help for all commands or for one command")
    class Help:
        def __init__(self):
            self.target = Unset

        @constructor
        @classmethod
        def about(cls, command: str):
            self = cls()
            self.target = command
            return self

        def execute(self):
            target = self.target
            # "-h w" stands for "-h -w": a prefixed name would open a new command
            if target is not Unset and target not in engine.commands:
                if engine.command_prefix + target in engine.commands:
                    target = engine.command_prefix + target
            engine.help(target)

    return Help


__all__ = (
    "render",
    "plain",
    "helper",
)
