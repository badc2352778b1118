"""
Helmsman engine: registration front door and the per-command dispatcher.

Overview
- Engine owns one CommandRegistry and one TypeRegistry (never shared
  implicitly) plus the fault subscribers.
- parse(tokens) runs a single command invocation; parse_all(tokens) segments
  the stream and runs every command in turn, moving on after a failure.

Dispatch (one command)
    AWAITING_COMMAND → CONSTRUCTING_COMMAND → BINDING_SUBCOMMANDS → EXECUTING → DONE
    any stage → FAILED

- AWAITING_COMMAND: look the name up; unknown → UnknownCommandError.
- CONSTRUCTING_COMMAND: lay the block out, resolve a constructor overload;
  no arity match (or a stray token) → WrongCommandUsageError; a rejected token
  → ArgumentParsingError; otherwise the command is instantiated.
- BINDING_SUBCOMMANDS: per group, in order; unknown name or no arity match →
  InvalidSubcommandError; a rejected token → ArgumentParsingError carrying
  both the command and the subcommand; otherwise the handler is called.
- EXECUTING: instance.execute().

Faults
- Nothing is raised to the caller: faults go through trigger(), which logs,
  notifies matching subscribers and, in shell mode, prints unhandled faults.
- Exceptions escaping user code (constructors, handlers, execute) are wrapped
  in DelegatedCommandError.

Example
    >>> engine = Engine("-", "--")
    >>> @command("-w", descr="write a message")
    ... class Write:
    ...     def __init__(self, text: str): self.text = text
    ...     @subcommand("--r")
    ...     def red(self, red: bool): self.red = red
    ...     def execute(self): print(self.text)
    >>> engine.register_command(Write)
    True
    >>> engine.parse(["-w", "hello", "--r", "true"])
    hello
    True
"""
import copy
import logging
import shlex
import sys
from collections.abc import Iterable
from enum import Enum

from . import faults
from .coercion import TypeRegistry
from .descriptors import CommandDescriptor, describe
from .faults import (
    ArgumentParsingError,
    CommandException,
    DelegatedCommandError,
    FaultCode,
    InvalidSubcommandError,
    UnknownCommandError,
    WrongCommandUsageError,
    getdoc,
)
from .help import console as stdout, helper as helpcommand, plain, render
from .registry import CommandRegistry
from .resolver import resolve
from .tokenizer import SegmentationError, layout, split
from .utils import Unset, ordinal

logger = logging.getLogger(__name__)


class Stage(Enum):
    AWAITING_COMMAND = "awaiting-command"
    CONSTRUCTING_COMMAND = "constructing-command"
    BINDING_SUBCOMMANDS = "binding-subcommands"
    EXECUTING = "executing"
    DONE = "done"
    FAILED = "failed"


class Engine:
    """
    Command-line invocation engine.

    Parameters
    - command_prefix: prefix of command names (default "-").
    - subcommand_prefix: prefix of subcommand names (default "--"); always
      tested before the command prefix.
    - types: a TypeRegistry to use instead of a fresh one.
    - helper: name under which the built-in help command is registered.
    - shell: print faults nobody subscribed to on stderr.
    - fancy: render faults and help inside panels.
    - colorful: style rendered output.

    Raises
    - TypeError: on options of the wrong type.
    - ValueError: on empty or identical prefixes, or a helper name that cannot
      be registered.
    """

    def __init__(self, command_prefix="-", subcommand_prefix="--", /, *, types=Unset, helper=Unset, shell=False, fancy=False, colorful=False):
        for field, prefix in (("command_prefix", command_prefix), ("subcommand_prefix", subcommand_prefix)):
            if not isinstance(prefix, str):
                raise TypeError(f"engine {field!r} must be a string")
            if not prefix or prefix.isspace():
                raise ValueError(f"engine {field!r} must not be empty")
        if command_prefix == subcommand_prefix:
            raise ValueError("engine prefixes must be distinct")
        if types is not Unset and not isinstance(types, TypeRegistry):
            raise TypeError("engine 'types' must be a type registry")
        for field, flag in (("shell", shell), ("fancy", fancy), ("colorful", colorful)):
            if not isinstance(flag, bool):
                raise TypeError(f"engine {field!r} must be a boolean")

        self._command_prefix = command_prefix
        self._subcommand_prefix = subcommand_prefix
        self._types = TypeRegistry() if types is Unset else types
        self._commands = CommandRegistry()
        self._subscribers = []
        self._stage = Stage.AWAITING_COMMAND

        self.shell = shell
        self.fancy = fancy
        self.colorful = colorful

        if helper is not Unset:
            if not isinstance(helper, str):
                raise TypeError("engine 'helper' must be a string")
            if not self.register_command(helpcommand(self, helper)):
                raise ValueError(f"engine 'helper' {helper!r} cannot be registered as a command")
        self._helper = helper

    @property
    def command_prefix(self):
        return self._command_prefix

    @property
    def subcommand_prefix(self):
        return self._subcommand_prefix

    @property
    def types(self):
        return self._types

    @property
    def commands(self):
        return self._commands

    @property
    def stage(self):
        """
        Stage reached by the last dispatched command.
        """
        return self._stage

    def register_command(self, candidate, /):
        """
        Register a @command class or a CommandDescriptor.

        Returns False (never raises) when the candidate is malformed, misses a
        callable execute(), uses names that do not carry the engine prefixes,
        or when its name is already registered.
        """
        if not isinstance(candidate, CommandDescriptor):
            try:
                candidate = describe(candidate)
            except (TypeError, ValueError) as exception:
                logger.info("refused command %r: %s", candidate, exception)
                return False

        if not candidate.name.startswith(self._command_prefix) or candidate.name.startswith(self._subcommand_prefix):
            logger.info("refused command %r: name must start with %r", candidate.name, self._command_prefix)
            return False
        for subcommand in candidate.subcommands:
            if not subcommand.name.startswith(self._subcommand_prefix):
                logger.info(
                    "refused command %r: subcommand %r must start with %r",
                    candidate.name, subcommand.name, self._subcommand_prefix
                )
                return False

        return self._commands.register(candidate)

    def register_type_parser(self, tag, parser, /):
        """
        Register a parser for a type tag; False when refused (never raises).
        """
        try:
            return self._types.register(tag, parser)
        except TypeError as exception:
            logger.info("refused parser for %r: %s", tag, exception)
            return False

    def subscribe(self, kind, handler=Unset, /):
        """
        Call handler with every triggered fault that is an instance of kind.

        Usable as a decorator:
            >>> @engine.subscribe(UnknownCommandError)
            ... def unknown(fault): ...
        """
        if not isinstance(kind, type) or not issubclass(kind, CommandException):
            raise TypeError("subscribe() kind must be a command exception type")
        if handler is Unset:
            def decorator(handler, /):
                return self.subscribe(kind, handler)
            return decorator
        if not callable(handler):
            raise TypeError("subscribe() handler must be callable")
        self._subscribers.append((kind, handler))
        return handler

    def unsubscribe(self, kind, handler, /):
        """
        Remove one subscription; False when it was not subscribed.
        """
        try:
            self._subscribers.remove((kind, handler))
        except ValueError:
            return False
        return True

    def trigger(self, fault, /, **options):
        """
        Deliver a fault: merge runtime options, log it, notify subscribers.

        In shell mode a fault no subscriber matched is printed on stderr.
        A handler that raises is logged and the remaining handlers still run.
        Returns the delivered fault (with merged options).
        """
        if not isinstance(fault, CommandException):
            raise TypeError("trigger() argument must be a command exception")
        fault = copy.replace(
            fault,
            **options,
            engine=self,
            stage=self._stage,
            shell=self.shell,
            fancy=self.fancy,
            colorful=self.colorful
        )
        logger.info("%s: %s", type(fault).__name__, fault.message)

        handled = False
        for kind, handler in tuple(self._subscribers):
            if isinstance(fault, kind):
                handled = True
                try:
                    handler(fault)
                except Exception:
                    logger.exception("subscriber %r failed on %s", handler, type(fault).__name__)
        if self.shell and not handled:
            faults.render(fault)
        return fault

    def parse(self, tokens=Unset, /):
        """
        Run one command invocation.

        Parameters
        - tokens:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string, split via shlex.split.
          • Iterable[str]: pre-tokenized sequence, passed through unchanged.

        The first token names the command; every following token belongs to it.
        Returns True when the command executed, False after a fault.
        """
        tokens = self._tokenize(tokens, "parse")
        self._types.freeze()
        if not tokens:
            self._stage = Stage.FAILED
            self.trigger(UnknownCommandError(
                "no command given",
                tokens=(),
                code=FaultCode.UNKNOWN_COMMAND,
                title="unknown command",
                hint=self._commands_hint(),
                docs=getdoc(FaultCode.UNKNOWN_COMMAND),
            ))
            return False
        name, *rest = tokens
        return self._dispatch(name, rest)

    def parse_all(self, tokens=Unset, /):
        """
        Segment the stream into command invocations and run each in turn.

        A failing command does not stop the following ones.
        """
        tokens = self._tokenize(tokens, "parse_all")
        self._types.freeze()
        for segment in split(tokens, self._command_prefix, self._subcommand_prefix):
            self._dispatch(segment.name, segment.tokens)

    def gethelp(self, name=Unset, /):
        """
        Return the help text (all commands, or one) as plain text.
        """
        return plain(render(self._commands, name, fancy=self.fancy))

    def help(self, name=Unset, /):
        """
        Print the help (all commands, or one) on stdout.
        """
        stdout.print(render(self._commands, name, colorful=self.colorful, fancy=self.fancy))

    def _tokenize(self, prompt, caller, /):
        if prompt is Unset:
            return sys.argv[1:]
        if isinstance(prompt, str):
            return shlex.split(prompt)
        if isinstance(prompt, Iterable):
            tokens = []
            for item in prompt:
                if not isinstance(item, str):
                    raise TypeError(f"{caller}() argument must be a string or an iterable of strings")
                tokens.append(item)
            return tokens
        raise TypeError(f"{caller}() argument must be a string or an iterable of strings")

    def _advance(self, stage, /):
        logger.debug("stage %s → %s", self._stage.value, stage.value)
        self._stage = stage

    def _fail(self, fault, /):
        self._advance(Stage.FAILED)
        self.trigger(fault, docs=getdoc(fault.code) if isinstance(fault.code, FaultCode) else None)
        return False

    def _commands_hint(self):
        if self._helper is not Unset:
            return f"run '{self._helper}' to list the available commands"
        if names := [descriptor.name for descriptor in self._commands]:
            return "available commands: " + ", ".join(names)
        return "no command is registered"

    def _usage_hint(self, name, signatures, /):
        return "usage: " + " | ".join(
            " ".join([name, *(f"<{parameter}>" for parameter in signature.parameters)])
            for signature in signatures
        )

    def _dispatch(self, name, tokens, /):
        tokens = tuple(tokens)
        self._stage = Stage.AWAITING_COMMAND
        logger.debug("dispatching %r with %d token(s)", name, len(tokens))

        if (descriptor := self._commands.lookup(name)) is None:
            return self._fail(UnknownCommandError(
                f"unknown command {name!r}",
                command=name,
                tokens=tokens,
                code=FaultCode.UNKNOWN_COMMAND,
                title="unknown command",
                hint=self._commands_hint(),
            ))

        self._advance(Stage.CONSTRUCTING_COMMAND)
        try:
            arguments, groups = layout(tokens, self._command_prefix, self._subcommand_prefix)
        except SegmentationError as exception:
            return self._fail(WrongCommandUsageError(
                f"unexpected token {exception.token!r} at the {ordinal(exception.position + 1)} position of command {name!r}",
                command=name,
                tokens=tokens,
                code=FaultCode.WRONG_COMMAND_USAGE,
                title="wrong command usage",
                hint=f"only subcommands starting with {self._subcommand_prefix!r} may follow the arguments",
            ))

        resolution = resolve(descriptor.constructors, arguments, self._types)
        if not resolution and resolution.shaped:
            return self._fail(ArgumentParsingError(
                f"invalid argument for command {name!r}: {resolution.error}",
                command=name,
                tokens=tuple(arguments),
                code=FaultCode.ARGUMENT_PARSING_ERROR,
                title="argument parsing error",
                hint=self._usage_hint(name, descriptor.constructors),
                error=resolution.error,
            ))
        if not resolution:
            return self._fail(WrongCommandUsageError(
                f"command {name!r} does not take {len(arguments)} argument(s)",
                command=name,
                tokens=tuple(arguments),
                code=FaultCode.WRONG_COMMAND_USAGE,
                title="wrong command usage",
                hint=self._usage_hint(name, descriptor.constructors),
            ))

        try:
            instance = resolution.signature.invoke(resolution.values)
        except Exception as exception:
            return self._fail(DelegatedCommandError(
                f"command {name!r} failed to construct: {exception}",
                command=name,
                tokens=tuple(arguments),
                code=FaultCode.DELEGATED_ERROR,
                title="delegated error",
                exception=exception,
            ))

        self._advance(Stage.BINDING_SUBCOMMANDS)
        for position, group in enumerate(groups, 1):
            if not (candidates := descriptor.lookup(group.name)):
                return self._fail(InvalidSubcommandError(
                    f"unknown subcommand {group.name!r} for command {name!r}",
                    command=name,
                    subcommand=group.name,
                    tokens=tuple(group.tokens),
                    code=FaultCode.INVALID_SUBCOMMAND,
                    title="invalid subcommand",
                    hint="available subcommands: " + (", ".join(s.name for s in descriptor.subcommands) or "none"),
                ))

            resolution = resolve(candidates, group.tokens, self._types)
            if not resolution and resolution.shaped:
                return self._fail(ArgumentParsingError(
                    f"invalid argument for subcommand {group.name!r} of command {name!r}: {resolution.error}",
                    command=name,
                    subcommand=group.name,
                    tokens=tuple(group.tokens),
                    code=FaultCode.ARGUMENT_PARSING_ERROR,
                    title="argument parsing error",
                    hint=self._usage_hint(group.name, candidates),
                    error=resolution.error,
                ))
            if not resolution:
                return self._fail(InvalidSubcommandError(
                    f"subcommand {group.name!r} of command {name!r} does not take {len(group.tokens)} argument(s)",
                    command=name,
                    subcommand=group.name,
                    tokens=tuple(group.tokens),
                    code=FaultCode.INVALID_SUBCOMMAND,
                    title="invalid subcommand",
                    hint=self._usage_hint(group.name, candidates),
                ))

            try:
                resolution.signature.invoke(resolution.values, target=instance)
            except Exception as exception:
                return self._fail(DelegatedCommandError(
                    f"{ordinal(position)} subcommand {group.name!r} of command {name!r} failed: {exception}",
                    command=name,
                    subcommand=group.name,
                    tokens=tuple(group.tokens),
                    code=FaultCode.DELEGATED_ERROR,
                    title="delegated error",
                    exception=exception,
                ))

        self._advance(Stage.EXECUTING)
        try:
            instance.execute()
        except Exception as exception:
            return self._fail(DelegatedCommandError(
                f"command {name!r} failed: {exception}",
                command=name,
                tokens=tokens,
                code=FaultCode.DELEGATED_ERROR,
                title="delegated error",
                exception=exception,
            ))

        self._advance(Stage.DONE)
        return True


__all__ = (
    "Engine",
    "Stage",
)
