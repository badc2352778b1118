"""
Helmsman faults: the signals an engine hands to its subscribers.

Signals
- UnknownCommandError     the first token names no registered command.
- WrongCommandUsageError  no constructor overload takes that many arguments,
                          or a stray token follows them.
- InvalidSubcommandError  unknown subcommand, or no overload takes its arguments.
- ArgumentParsingError    an overload had the right shape but a token did not
                          convert (command, and subcommand when bound there).
- DelegatedCommandError   a constructor, handler or execute() raised.

A fault is a value, not control flow: the engine builds one, stamps runtime
options on it with copy.replace() and passes it to Engine.trigger(). Shell
mode prints the faults nobody subscribed to through render().

Host hooks (attributes of __main__)
- __prog__    program name shown in the fault header.
- __codes__   FaultCode → label, replacing the numeric code.
- __docs__    FaultCode → short documentation line.
- __styles__  style overrides for the keys of STYLES.
"""
import copy
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, UnsetType, palette

console = Console(stderr=True)

STYLES = {
    "fault-prog": "bold #F5F5F5",
    "fault-code": "bold #22D3EE",
    "fault-title": "bold #F472B6",
    "fault-message": "#D4D4D8",
    "fault-arrow": "dim #86EFAC",
    "fault-hint": "italic #86EFAC",
    "fault-docs": "dim #A1A1AA",
}


class FaultCode(IntEnum):
    """
    Numeric fault identifiers, stable across releases.

    2110x routing · 2111x usage · 2112x values · 2113x user code
    """
    UNKNOWN_COMMAND             = 21101
    INVALID_SUBCOMMAND          = 21102

    WRONG_COMMAND_USAGE         = 21111

    ARGUMENT_PARSING_ERROR      = 21121

    DELEGATED_ERROR             = 21131

    def normalize(self):
        """
        Label of this code: the host's __codes__ entry, else the number.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    Base fault: a message plus read-only options.

    Options read by the engine and the renderer
    - command, subcommand, tokens: where the fault happened.
    - code, title, hint, docs: what the header and footer show.
    - error, exception: the underlying CoercionError or user exception.
    - engine, stage, shell, fancy, colorful: stamped by Engine.trigger().
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | UnsetType)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def command(self):
        return self.options.get("command")

    @property
    def subcommand(self):
        return self.options.get("subcommand")

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        style = palette(STYLES, colorful=self.options.get("colorful", False))

        code = self.code.normalize() if isinstance(self.code, FaultCode) else "-"
        header = Text.assemble(
            "[ ",
            (getattr(__import__("__main__"), "__prog__", "helmsman"), style("fault-prog")),
            " - ",
            (code, style("fault-code")),
            " | ",
            (str(self.options.get("title", "fault")).title(), style("fault-title")),
            " ]",
        )

        lines = [Text(self.message or "", style("fault-message"))]
        if hint := self.options.get("hint"):
            lines.append(Text.assemble((" → ", style("fault-arrow")), (hint, style("fault-hint"))))
        if docs := self.options.get("docs"):
            lines.append(Text(docs, style("fault-docs")))

        if self.options.get("fancy", False):
            return Panel(Group(*lines), title=header, title_align="left")
        return Group(header, *lines)

    def __replace__(self, /, **changes):
        return type(self)(self.message, **(dict(self.options) | changes))


class UnknownCommandError(CommandException): ...
class WrongCommandUsageError(CommandException): ...
class InvalidSubcommandError(CommandException): ...
class ArgumentParsingError(CommandException): ...
class DelegatedCommandError(CommandException): ...


def getdoc(code, /):
    """
    Host documentation for a fault code (__main__.__docs__), or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


def render(fault, /, **options):
    """
    Print a fault on stderr with options merged in.
    """
    if not isinstance(fault, CommandException):
        raise TypeError("render() argument must be a command exception")
    console.print(copy.replace(fault, **options))


__all__ = (
    "CommandException",
    "UnknownCommandError",
    "WrongCommandUsageError",
    "InvalidSubcommandError",
    "ArgumentParsingError",
    "DelegatedCommandError",
    "FaultCode",
    "getdoc",
    "render",
)
