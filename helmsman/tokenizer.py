"""
Helmsman tokenizer: segment a flat token stream into commands and subcommand groups.

Two scans, both "consume tokens until the next boundary":

- split(tokens, ...) → [Segment(name, tokens), ...]
  The first token of each segment is the command name; the following tokens
  belong to it while they do not start with the command prefix, or while they
  start with the subcommand prefix (subcommands are not command boundaries).

- layout(tokens, ...) → Layout(arguments, groups)
  Within one command block, leading plain tokens are the constructor
  arguments; each subcommand-prefixed token then opens a Group consuming the
  tokens up to the next subcommand-prefixed token.

Prefix tests
- classify() always checks the subcommand prefix before the command prefix,
  so with "-"/"--" a token like "--r" is a subcommand, never a new command.

Failure
- layout() raises SegmentationError when a boundary is expected and the token
  is not a subcommand (e.g. "-x" after the constructor arguments of a single
  command invocation). The engine reports it as wrong usage.
"""
import logging
from collections import namedtuple
from enum import Enum

logger = logging.getLogger(__name__)

Segment = namedtuple("Segment", ("name", "tokens"))
Group = namedtuple("Group", ("name", "tokens"))
Layout = namedtuple("Layout", ("arguments", "groups"))


class TokenKind(Enum):
    SUBCOMMAND = "subcommand"
    COMMAND = "command"
    VALUE = "value"


class SegmentationError(ValueError):
    """
    A token appeared where only a subcommand boundary was acceptable.
    """

    def __init__(self, token, position, /):
        self.token = token
        self.position = position
        super().__init__("unexpected token %r at position %d" % (token, position))


def classify(token, command_prefix, subcommand_prefix, /):
    """
    Return the TokenKind of a token (subcommand prefix checked first).
    """
    if token.startswith(subcommand_prefix):
        return TokenKind.SUBCOMMAND
    if token.startswith(command_prefix):
        return TokenKind.COMMAND
    return TokenKind.VALUE


def split(tokens, command_prefix, subcommand_prefix, /):
    """
    Segment a whole stream into one Segment per command invocation.
    """
    tokens = list(tokens)
    segments = []
    index = 0
    while index < len(tokens):
        name = tokens[index]
        index += 1
        block = []
        while index < len(tokens) and classify(tokens[index], command_prefix, subcommand_prefix) is not TokenKind.COMMAND:
            block.append(tokens[index])
            index += 1
        segments.append(Segment(name, block))
    logger.debug("split %d token(s) into %d segment(s)", len(tokens), len(segments))
    return segments


def layout(tokens, command_prefix, subcommand_prefix, /):
    """
    Split one command's argument block into constructor arguments and groups.

    Raises
    - SegmentationError: on a non-subcommand token where a group must start.
    """
    tokens = list(tokens)
    index = 0

    arguments = []
    while index < len(tokens) and classify(tokens[index], command_prefix, subcommand_prefix) is TokenKind.VALUE:
        arguments.append(tokens[index])
        index += 1

    groups = []
    while index < len(tokens):
        if classify(name := tokens[index], command_prefix, subcommand_prefix) is not TokenKind.SUBCOMMAND:
            raise SegmentationError(name, index)
        index += 1
        values = []
        while index < len(tokens) and classify(tokens[index], command_prefix, subcommand_prefix) is not TokenKind.SUBCOMMAND:
            values.append(tokens[index])
            index += 1
        groups.append(Group(name, values))

    return Layout(arguments, groups)


__all__ = (
    "Segment",
    "Group",
    "Layout",
    "TokenKind",
    "SegmentationError",
    "classify",
    "split",
    "layout",
)
