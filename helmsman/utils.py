"""
Helmsman utilities shared by the descriptor, coercion and engine layers.

Contents
- Unset: "argument not given" marker, told apart from an explicit None.
- coalesce(value, default): swap Unset for a default.
- rename("name"): decorator fixing __name__/__qualname__ of generated functions.
- mirror("field"): read-only property over "_field" returning frozen views.
- palette(defaults, colorful): style lookup honouring __main__.__styles__.
- ordinal(n): "first", "second", …, "11th", "21st" for position-first messages.

    >>> coalesce(Unset, "-h")
    '-h'
    >>> ordinal(2), ordinal(12), ordinal(23)
    ('second', '12th', '23rd')
"""
import functools
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker; calling it always returns the same object.

    Unset is falsy, prints as "Unset", pickles back to itself and cannot be
    subclassed. Use `isinstance(x, str | UnsetType)` in argument checks.
    """
    __slots__ = ()
    __instance = None

    def __new__(cls):
        if cls.__instance is None:
            cls.__instance = super().__new__(cls)
        return cls.__instance

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return "Unset"


Unset = UnsetType()


def coalesce(value, default=None, /):
    """
    Return default when value is Unset; falsy values such as None or "" are kept.
    """
    return default if value is Unset else value


def rename(name, /):
    """
    Decorator giving a generated function a stable name in reprs and tracebacks.
    """
    if not isinstance(name, str):
        raise TypeError("@rename() argument must be a string")

    def decorator(function):
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def mirror(name, /):
    """
    Read-only property exposing the private field "_" + name.

    Lists and tuples come back as tuples, mappings as MappingProxyType and sets
    as frozensets, so callers cannot mutate a descriptor through its fields.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")
    field = "_" + name

    @rename(name)
    def getter(self):
        match getattr(self, field):
            case str() as value:
                return value
            case Sequence() as value:
                return tuple(value)
            case Mapping() as value:
                return MappingProxyType(value)
            case Set() as value:
                return frozenset(value)
            case value:
                return value

    return property(getter, doc=f"read-only view of {field}")


def palette(defaults, /, colorful=True):
    """
    Style lookup over default styles overridden by __main__.__styles__.

    The returned function maps a style key to a rich style string; unknown
    keys and every key when colorful is False map to "".
    """
    styles = {**defaults, **getattr(__import__("__main__"), "__styles__", {})}

    def style(key, /):
        return styles.get(key, "") if colorful else ""

    return style


_WORDS = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")


@functools.lru_cache(maxsize=None, typed=True)
def ordinal(number, /):
    """
    Ordinal label of a 1-based position: words up to ten, suffixed digits after.
    """
    if not isinstance(number, int) or isinstance(number, bool):
        raise TypeError("ordinal() argument must be an integer")
    if 1 <= number <= len(_WORDS):
        return _WORDS[number - 1]
    if number % 100 in (11, 12, 13):
        return f"{number}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "palette",
    "ordinal",
    "UnsetType",
    "Unset",
)
