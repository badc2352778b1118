"""
Helmsman type coercion: turn raw string tokens into typed values.

What this module provides
- TypeRegistry: a mapping from type tag to parser, extensible through explicit
  registration and frozen once an engine starts parsing.
- CoercionError: the single failure type of coerce(); carries the tag and token.
- Width tags for range-checked numbers: int8 … uint64, float32.

Parsers
- A parser is any callable taking one token (str) and returning the value.
- Parsers reject a token by raising ValueError (TypeError and OverflowError are
  treated the same way); the registry reports it as CoercionError.

Built-in tags
- str    → the token unchanged.
- int    → optionally signed decimal digits (surrounding whitespace allowed).
- int8, int16, int32, int64, uint8, uint16, uint32, uint64 → int with range check.
- float  → decimal/scientific notation, nan and inf included.
- float32 → float restricted to the single-precision range.
- bool   → "true"/"false", case-insensitive.
- any enum.Enum subclass → member by name, case-insensitive (no registration needed).

Example
    >>> registry = TypeRegistry()
    >>> registry.coerce(int32, " 42 ")
    42
    >>> registry.register(complex, complex)
    True
"""
import functools
import logging
import re
from enum import Enum
from typing import NewType

from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

int8 = NewType("int8", int)
int16 = NewType("int16", int)
int32 = NewType("int32", int)
int64 = NewType("int64", int)
uint8 = NewType("uint8", int)
uint16 = NewType("uint16", int)
uint32 = NewType("uint32", int)
uint64 = NewType("uint64", int)
float32 = NewType("float32", float)

_FLOAT32_MAX = 3.4028234663852886e38


class CoercionError(ValueError):
    """
    A token could not be converted to the requested type tag.
    """

    def __init__(self, tag, token, /, reason=Unset):
        self.tag = tag
        self.token = token
        self.reason = coalesce(reason)
        message = "cannot convert %r to %s" % (token, typename(tag))
        if self.reason:
            message += " (%s)" % self.reason
        super().__init__(message)


def typename(tag, /):
    """
    Return the display name of a type tag ("int32", "Color", "str", …).
    """
    return getattr(tag, "__name__", None) or repr(tag)


def _parse_integer(token, /, lower=None, upper=None):
    if not re.fullmatch(r"[+-]?\d+", token := token.strip(), re.ASCII):
        raise ValueError("not an integer")
    value = int(token)
    if lower is not None and value < lower:
        raise ValueError("below %d" % lower)
    if upper is not None and value > upper:
        raise ValueError("above %d" % upper)
    return value


def _parse_float(token, /, single=False):
    # float() also accepts digit separators; tokens must not
    if "_" in (token := token.strip()):
        raise ValueError("digit separators are not allowed")
    value = float(token)
    if single and abs(value) > _FLOAT32_MAX and abs(value) != float("inf"):
        raise ValueError("outside single precision range")
    return value


def _parse_bool(token, /):
    match token.strip().lower():
        case "true":
            return True
        case "false":
            return False
    raise ValueError("expected 'true' or 'false'")


def _parse_str(token, /):
    return token


def _parse_enum(enumeration, token, /):
    """
    Resolve an enum member by name, case-insensitive (exact case wins on clashes).
    """
    token = token.strip()
    members = enumeration.__members__
    if token in members:
        return members[token]
    for name, member in members.items():
        if name.casefold() == token.casefold():
            return member
    raise ValueError("expected one of %s" % ", ".join(members))


def _width(bits, signed):
    if signed:
        return functools.partial(_parse_integer, lower=-(1 << (bits - 1)), upper=(1 << (bits - 1)) - 1)
    return functools.partial(_parse_integer, lower=0, upper=(1 << bits) - 1)


_BUILTINS = {
    str: _parse_str,
    int: _parse_integer,
    int8: _width(8, True),
    int16: _width(16, True),
    int32: _width(32, True),
    int64: _width(64, True),
    uint8: _width(8, False),
    uint16: _width(16, False),
    uint32: _width(32, False),
    uint64: _width(64, False),
    float: _parse_float,
    float32: functools.partial(_parse_float, single=True),
    bool: _parse_bool,
}


class TypeRegistry:
    """
    Mapping from type tag to parser, consulted read-only during resolution.

    Lifecycle
    - Built with a copy of the built-in parser table (no shared global state).
    - register() adds parsers for new tags; re-registering a tag is refused.
    - freeze() ends the registration phase; the engine calls it before parsing.

    Lookup order
    - an exact registered tag wins (so a host may register its own parser for
      one enum type); otherwise enum.Enum subclasses use the by-name parser.
    """

    def __init__(self):
        self._parsers = dict(_BUILTINS)
        self._frozen = False

    @property
    def frozen(self):
        return self._frozen

    def freeze(self):
        """
        Refuse any further registration.
        """
        if not self._frozen:
            logger.debug("type registry frozen with %d parsers", len(self._parsers))
        self._frozen = True

    def register(self, tag, parser, /):
        """
        Register a parser for a new tag.

        Returns
        - True when registered.
        - False when the tag is already known or the registry is frozen.

        Raises
        - TypeError: when the tag is unhashable or the parser is not callable.
        """
        if not callable(parser):
            raise TypeError("type registry parser must be callable")
        try:
            hash(tag)
        except TypeError:
            raise TypeError("type registry tag must be hashable") from None

        if self._frozen:
            logger.debug("refused parser for %s: registry is frozen", typename(tag))
            return False
        if tag in self._parsers:
            logger.debug("refused parser for %s: tag already registered", typename(tag))
            return False
        self._parsers[tag] = parser
        logger.debug("registered parser for %s", typename(tag))
        return True

    def lookup(self, tag, /):
        """
        Return the parser for a tag, or None when the tag is unknown.
        """
        try:
            return self._parsers[tag]
        except (KeyError, TypeError):
            pass
        if isinstance(tag, type) and issubclass(tag, Enum):
            return functools.partial(_parse_enum, tag)
        return None

    def __contains__(self, tag):
        return self.lookup(tag) is not None

    def coerce(self, tag, token, /):
        """
        Convert a token to the value of a tag.

        Raises
        - TypeError: when the token is not a string.
        - CoercionError: when the tag is unknown or the parser rejects the token.
        """
        if not isinstance(token, str):
            raise TypeError("coerce() token must be a string")
        if (parser := self.lookup(tag)) is None:
            raise CoercionError(tag, token, "no parser registered")
        try:
            return parser(token)
        except CoercionError:
            raise
        except (ValueError, TypeError, OverflowError) as exception:
            raise CoercionError(tag, token, str(exception) or Unset) from exception


__all__ = (
    "TypeRegistry",
    "CoercionError",
    "typename",
    "int8",
    "int16",
    "int32",
    "int64",
    "uint8",
    "uint16",
    "uint32",
    "uint64",
    "float32",
)
